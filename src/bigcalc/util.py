from functools import wraps


class CalcError(Exception):
    pass


class EvaluationError(CalcError):
    '''
    An expression that cannot be evaluated.

    Always carries a message fit for showing to the user as is. Where the
    failure has a place in the (normalized) expression, ``position`` and
    ``expression`` say where.
    '''

    def __init__(self, message, position=None, expression=None):
        super().__init__(message)
        self.position = position
        self.expression = expression

    @property
    def message(self):
        return self.args[0]


class InvalidNumber(EvaluationError):
    '''
    No digits where a number was expected.
    '''


class MultipleDecimalPoints(EvaluationError):
    '''
    A number with more than one decimal point, like 1..2 or 1.2.3.
    '''


class UnmatchedParenthesis(EvaluationError):
    '''
    An opening parenthesis that is never closed.
    '''


class UnexpectedCharacter(EvaluationError):
    '''
    A character outside the calculator's alphabet.
    '''


class UnexpectedTrailingInput(UnexpectedCharacter):
    '''
    Text left over after a complete expression, e.g. the )4 in 3)4.
    '''


class DivideByZero(EvaluationError):
    pass


class NegativeRadicand(EvaluationError):
    pass


class InvalidPower(EvaluationError):
    '''
    Power with no real result: negative base and fractional exponent, or zero
    to a negative power.
    '''


class NumericOverflow(EvaluationError):
    pass


class NestingTooDeep(EvaluationError):
    pass


def wrap_user_errors(fmt, error=EvaluationError):
    '''
    Decorator that converts library exceptions to calculator errors.

    Passes through CalcErrors. The message is fmt formatted with the wrapped
    function's arguments; the library exception is chained.
    '''
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except CalcError:
                raise
            except (ArithmeticError, ValueError) as e:
                raise error(fmt.format(*args, **kwargs)) from e
        return wrapper
    return decorator
