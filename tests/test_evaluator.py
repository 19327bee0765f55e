'''
Calculator evaluator tests
'''

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal, getcontext

import regex

from bigcalc import evaluate, try_evaluate
from bigcalc.util import (CalcError, EvaluationError, InvalidNumber,
                          MultipleDecimalPoints, UnmatchedParenthesis,
                          UnexpectedCharacter, UnexpectedTrailingInput,
                          DivideByZero, NegativeRadicand, InvalidPower,
                          NumericOverflow, NestingTooDeep)
from bigcalc.evaluator import Evaluator, power, square_root

from pytest import raises, mark


@mark.parametrize('expression, value', [
    ('1+2', '3'),
    ('0.1+0.2', '0.3'),
    ('10-4-3', '3'),
    ('100/10/5', '2'),
    ('2*3+4*5', '26'),
    ('2+3*4', '14'),
    ('(2+3)*4', '20'),
    ('7/2', '3.5'),
    ('1.10*3', '3.30'),
    ('3×4÷2', '6'),
    ('2x3', '6'),
    ('3 4', '34'),
    ('+5', '5'),
    ('-5+2', '-3'),
    ('-(1+2)*3', '-9'),
    ('2*-3', '-6'),
    ('((((7))))', '7'),
])
def test_arithmetic(evaluator, expression, value):
    assert evaluator.evaluate(expression) == Decimal(value)


def test_decimal_literals_round_trip(evaluator):
    for literal in ['0', '42', '.5', '5.', '0.000001', '1234567890.0987654321',
                    '3.14159265358979323846264338327950288']:
        assert str(evaluator.evaluate(literal)) == str(Decimal(literal))


def test_exact_decimal_arithmetic(evaluator):
    assert evaluator.evaluate('0.1+0.2-0.3') == 0
    assert evaluator.evaluate('1.1*1.1') == Decimal('1.21')
    assert evaluator.evaluate('1/8') == Decimal('0.125')
    assert evaluator.evaluate('1/3') == Decimal(1) / Decimal(3)


def test_power(evaluator):
    assert evaluator.evaluate('(8-5)*2.5^3') == Decimal('46.875')
    assert evaluator.evaluate('2.5^3') == Decimal('15.625')
    assert evaluator.evaluate('2^0.5') == Decimal('1.4142135623730951')
    assert evaluator.evaluate('4^-1') == Decimal('0.25')


def test_power_is_right_associative(evaluator):
    assert evaluator.evaluate('2^3^2') == 512
    assert evaluator.evaluate('(2^3)^2') == 64


def test_sign_binds_tighter_than_power(evaluator):
    assert evaluator.evaluate('-2^2') == 4
    assert evaluator.evaluate('-(2^2)') == -4


def test_whole_powers_have_no_fraction(evaluator):
    assert str(evaluator.evaluate('2^9')) == '512'


def test_square_root(evaluator):
    assert evaluator.evaluate('√16') == 4
    assert evaluator.evaluate('√2') == Decimal('1.4142135623730951')
    assert evaluator.evaluate('-√4') == -2
    assert evaluator.evaluate('√(9+16)') == 5
    assert evaluator.evaluate('√√16') == 2
    assert evaluator.evaluate('3*√4') == 6


@mark.parametrize('expression', ['', '   ', '\t\n'])
def test_empty(evaluator, expression):
    assert evaluator.evaluate(expression) == 0


@mark.parametrize('expression', ['1/0', '1/(2-2)', '0/0', '5/0.0'])
def test_divide_by_zero(evaluator, expression):
    with raises(DivideByZero, match='Divide by zero'):
        evaluator.evaluate(expression)


@mark.parametrize('expression', ['√-4', '√(-4)', '√(1-5)', '√-0.01'])
def test_negative_radicand(evaluator, expression):
    with raises(NegativeRadicand, match='negative'):
        evaluator.evaluate(expression)


@mark.parametrize('expression', ['(1+2', '((1)', '(1+2a', '-(3'])
def test_unmatched_parenthesis(evaluator, expression):
    with raises(UnmatchedParenthesis, match='Missing closing parenthesis'):
        evaluator.evaluate(expression)


@mark.parametrize('expression', ['1..2', '1.2.3', '1+2..'])
def test_multiple_decimal_points(evaluator, expression):
    with raises(MultipleDecimalPoints):
        evaluator.evaluate(expression)


@mark.parametrize('expression', ['.', '1+', '*3', '--5', '()', '(', '√', '2^',
                                 '1+.'])
def test_invalid_number(evaluator, expression):
    with raises(InvalidNumber, match='Invalid number'):
        evaluator.evaluate(expression)


def test_trailing_input(evaluator):
    with raises(UnexpectedTrailingInput) as info:
        evaluator.evaluate('3)4')
    assert info.value.position == 1
    assert info.value.expression == '3)4'
    assert str(info.value) == "Unexpected character at position 1 in '3)4'"


def test_trailing_input_is_normalized(evaluator):
    with raises(UnexpectedTrailingInput,
                match=regex.escape("position 3 in '2*3a'")):
        evaluator.evaluate('2 × 3 a')


def test_unexpected_character(evaluator):
    with raises(UnexpectedCharacter) as info:
        evaluator.evaluate('1+%')
    assert not isinstance(info.value, UnexpectedTrailingInput)
    assert info.value.position == 2


def test_invalid_power(evaluator):
    with raises(InvalidPower, match='no real value'):
        evaluator.evaluate('(-8)^(1/3)')
    with raises(InvalidPower):
        evaluator.evaluate('0^-1')


def test_overflow(evaluator):
    with raises(NumericOverflow, match='too large'):
        evaluator.evaluate('10^400')
    with raises(NumericOverflow):
        evaluator.evaluate('(10^300)^2')


def test_nesting_limit(evaluator):
    depth = Evaluator.MAX_DEPTH
    assert evaluator.evaluate('(' * depth + '1' + ')' * depth) == 1
    with raises(NestingTooDeep):
        evaluator.evaluate('(' * (depth + 1) + '1' + ')' * (depth + 1))
    with raises(NestingTooDeep):
        evaluator.evaluate('√' * (depth * 2) + '1')
    with raises(NestingTooDeep):
        evaluator.evaluate('^'.join(['1'] * (depth * 2)))


@mark.parametrize('expression', ['1/0', '√-1', '(', '1..2', '.', '3)4', 'a',
                                 '0^-1', '10^400'])
def test_errors_have_messages(evaluator, expression):
    with raises(EvaluationError) as info:
        evaluator.evaluate(expression)
    assert isinstance(info.value, CalcError)
    assert str(info.value)
    assert info.value.message == str(info.value)


def test_try_evaluate():
    result = try_evaluate('1+1')
    assert result.ok
    assert result.value == 2
    assert result.error is None

    result = try_evaluate('1/0')
    assert not result.ok
    assert result.value is None
    assert isinstance(result.error, DivideByZero)


def test_module_evaluate():
    assert evaluate('(8-5)*2') == 6
    with raises(UnmatchedParenthesis):
        evaluate('(8-5*2')


def test_idempotent(evaluator):
    for expression in ['1/3', '2^0.5', '(8-5)*2.5^3', '√2']:
        assert evaluator.evaluate(expression) == evaluator.evaluate(expression)
    first = try_evaluate('1/0')
    second = try_evaluate('1/0')
    assert str(first.error) == str(second.error)


def test_precision():
    assert Evaluator(precision=5).evaluate('1/3') == Decimal('0.33333')
    assert Evaluator(precision=5).evaluate('2/3') == Decimal('0.66667')


def test_callers_context_untouched():
    before = getcontext().prec
    Evaluator(precision=5).evaluate('1/3')
    assert getcontext().prec == before


def test_negation_is_exact(evaluator):
    literal = '1.23456789012345678901234567890123456789'
    assert evaluator.evaluate('-' + literal) == Decimal('-' + literal)


def test_concurrent_evaluations(evaluator):
    expressions = ['{}/7+{}'.format(i, i) for i in range(200)]
    expected = [evaluator.evaluate(e) for e in expressions]
    with ThreadPoolExecutor(max_workers=8) as executor:
        assert list(executor.map(evaluator.evaluate, expressions)) == expected


def test_helpers():
    assert power(Decimal(2), Decimal(10)) == 1024
    assert square_root(Decimal('0.25')) == Decimal('0.5')
    with raises(NegativeRadicand):
        square_root(Decimal(-1))
    with raises(NumericOverflow):
        power(Decimal(10), Decimal(1000))


def test_grammar_is_documented():
    assert 'exponent   = primary [ "^" exponent ] ;' in Evaluator.GRAMMAR


@mark.parametrize('expression', ['-0', '0*-1', '√-0', '-0.0', '1-1', '-(0)'])
def test_zero_has_no_sign(evaluator, expression):
    value = evaluator.evaluate(expression)
    assert value == 0
    assert not value.is_signed()


def test_explicit_precision_is_kept():
    assert Evaluator(precision=0).precision == 0
    with raises(ValueError):
        Evaluator(precision=0).evaluate('1/3')
    assert Evaluator().precision == Evaluator.DEFAULT_PRECISION
