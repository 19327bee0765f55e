'''
Infix calculator with exact decimal arithmetic.

Evaluates expressions like (8-5)*2.5^3 or -√(2+2)÷4: numbers, + - * / and ^,
unary signs, parentheses and a prefix square root. × ÷ and x are accepted for
multiplication and division, and whitespace is ignored.

Addition, subtraction, multiplication and division are carried out on
decimal.Decimal, so 0.1+0.2 really is 0.3. Only ^ and √ go through floating
point.

The command line interface in bigcalc.cli keeps the last answer around as
``ans``.
'''

from .util import (CalcError, EvaluationError, InvalidNumber,
                   MultipleDecimalPoints, UnmatchedParenthesis,
                   UnexpectedCharacter, UnexpectedTrailingInput, DivideByZero,
                   NegativeRadicand, InvalidPower, NumericOverflow,
                   NestingTooDeep)
from .lexer import Cursor, Lexer, normalize
from .evaluator import Evaluator, Result, evaluate, try_evaluate
from .cli import CLI


__all__ = (
    'Evaluator', 'Lexer', 'Cursor', 'CLI', 'Result',
    'evaluate', 'try_evaluate', 'normalize',
    'CalcError', 'EvaluationError', 'InvalidNumber', 'MultipleDecimalPoints',
    'UnmatchedParenthesis', 'UnexpectedCharacter', 'UnexpectedTrailingInput',
    'DivideByZero', 'NegativeRadicand', 'InvalidPower', 'NumericOverflow',
    'NestingTooDeep',
)
