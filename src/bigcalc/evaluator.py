from collections import namedtuple
from decimal import (Decimal, Context, ROUND_HALF_EVEN, InvalidOperation,
                     DivisionByZero, Overflow, localcontext)
import math

from .util import (CalcError, DivideByZero, InvalidPower, NegativeRadicand,
                   NumericOverflow, UnexpectedTrailingInput,
                   UnmatchedParenthesis, wrap_user_errors)
from .lexer import Cursor, Lexer


class Result(namedtuple('Result', 'value error')):
    '''
    Outcome of one evaluation: a Decimal value, or the error that stopped it.
    '''
    __slots__ = ()

    @property
    def ok(self):
        return self.error is None


def _from_float(result):
    '''
    Bring a float result back into Decimal via its shortest repr.

    Whole numbers lose the float's trailing .0, so 2^9 is 512, not 512.0.
    '''
    if not math.isfinite(result):
        raise OverflowError(result)
    text = repr(result)
    if text.endswith('.0'):
        text = text[:-len('.0')]
    return Decimal(text)


@wrap_user_errors('{0} ^ {1} is too large', error=NumericOverflow)
def power(base, exponent):
    '''
    Raise base to exponent.

    Goes through float, so unlike the other operators this one may round.
    '''
    try:
        result = math.pow(float(base), float(exponent))
    except ValueError as e:
        raise InvalidPower('{} ^ {} has no real value'.format(
            base, exponent)) from e
    return _from_float(result)


@wrap_user_errors('\N{SQUARE ROOT}{0} is too large', error=NumericOverflow)
def square_root(value):
    '''
    Square root of value, through float like power().
    '''
    if value < 0:
        raise NegativeRadicand(
            'Cannot take the square root of negative number {}'.format(value))
    return _from_float(math.sqrt(float(value)))


class Evaluator:
    '''
    Recursive descent evaluator for infix arithmetic.

    Each grammar level folds into a running Decimal as it goes; there is no
    syntax tree. Addition, subtraction, multiplication and division are done
    in Decimal and are exact up to the context precision. Powers and square
    roots go through float.

    Holds only configuration, so one instance can serve any number of
    evaluations, from any number of threads.
    '''

    GRAMMAR = '''\
expression = term { ("+" | "-") term } ;
term       = exponent { ("*" | "/") exponent } ;
exponent   = primary [ "^" exponent ] ;
primary    = [ "+" | "-" ] ( "\N{SQUARE ROOT}" primary | "(" expression ")" | number ) ;
number     = { digit | "." } ;'''

    DEFAULT_PRECISION = 28
    # Groups, roots and exponents; each level costs a handful of Python frames.
    MAX_DEPTH = 100

    def __init__(self, precision=None, lexer=None):
        '''
        :param precision: Significant digits kept by + - * /.
        :param lexer: Lexer to normalize and scan numbers with.
        '''
        if precision is None:
            precision = type(self).DEFAULT_PRECISION
        self.precision = precision
        self.lexer = lexer or Lexer()

    def context(self):
        '''
        Return a fresh decimal context for one evaluation.
        '''
        return Context(prec=self.precision,
                       rounding=ROUND_HALF_EVEN,
                       traps=[InvalidOperation, DivisionByZero, Overflow])

    def evaluate(self, expression):
        '''
        Evaluate expression and return its value as a Decimal.

        Empty (or all whitespace) expressions are zero. Raises an
        EvaluationError subclass on any malformed or undefined expression.
        '''
        buffer = self.lexer.normalize(expression)
        if not buffer:
            return Decimal(0)
        cursor = Cursor(buffer, max_depth=type(self).MAX_DEPTH)
        with localcontext(self.context()):
            try:
                value = self.expression(cursor)
            except Overflow as e:
                raise NumericOverflow(
                    'Result of {!r} is too large'.format(buffer),
                    expression=buffer) from e
        if not cursor.at_end:
            raise UnexpectedTrailingInput(
                'Unexpected character at position {} in {!r}'.format(
                    cursor.position, buffer),
                position=cursor.position,
                expression=buffer)
        # No negative zero: -0, 0*-1 and √-0 are all plain 0.
        if value.is_zero():
            return value.copy_abs()
        return value

    def try_evaluate(self, expression):
        '''
        Like evaluate(), but return a Result instead of raising.
        '''
        try:
            return Result(self.evaluate(expression), None)
        except CalcError as e:
            return Result(None, e)

    def expression(self, cursor):
        '''
        expression = term { ("+" | "-") term }
        '''
        value = self.term(cursor)
        while True:
            op = cursor.accept('+', '-')
            if op is None:
                return value
            right = self.term(cursor)
            if op == '+':
                value = value + right
            else:
                value = value - right

    def term(self, cursor):
        '''
        term = exponent { ("*" | "/") exponent }
        '''
        value = self.exponent(cursor)
        while True:
            position = cursor.position
            op = cursor.accept('*', '/')
            if op is None:
                return value
            right = self.exponent(cursor)
            if op == '*':
                value = value * right
            elif right == 0:
                raise DivideByZero(
                    'Divide by zero at position {} in {!r}'.format(
                        position, cursor.buffer),
                    position=position,
                    expression=cursor.buffer)
            else:
                value = value / right

    def exponent(self, cursor):
        '''
        exponent = primary [ "^" exponent ]

        Right-associative: the exponent side recurses here rather than into
        primary, so 2^3^2 is 2^(3^2).
        '''
        base = self.primary(cursor)
        if cursor.accept('^') is None:
            return base
        with cursor.nested():
            exponent = self.exponent(cursor)
        return power(base, exponent)

    def primary(self, cursor):
        '''
        primary = [ "+" | "-" ] ( "√" primary | "(" expression ")" | number )

        The sign covers the whole primary: -√4 is -(√4), -(1+2) is -3.
        '''
        sign = cursor.accept('+', '-')
        if cursor.accept(self.lexer.SQRT):
            with cursor.nested():
                value = square_root(self.primary(cursor))
        elif cursor.accept(self.lexer.OPEN):
            start = cursor.position - 1
            with cursor.nested():
                value = self.expression(cursor)
            if cursor.accept(self.lexer.CLOSE) is None:
                raise UnmatchedParenthesis(
                    'Missing closing parenthesis for the one at position {} '
                    'in {!r}'.format(start, cursor.buffer),
                    position=start,
                    expression=cursor.buffer)
        else:
            value = self.lexer.number(cursor)
        if sign == '-':
            return value.copy_negate()
        return value


def evaluate(expression):
    '''
    Evaluate expression with a default Evaluator.
    '''
    return Evaluator().evaluate(expression)


def try_evaluate(expression):
    return Evaluator().try_evaluate(expression)
