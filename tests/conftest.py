from pytest import fixture

from bigcalc.lexer import Lexer
from bigcalc.evaluator import Evaluator


@fixture
def lexer() -> Lexer:
    return Lexer()


@fixture
def evaluator() -> Evaluator:
    '''
    Evaluator with default precision, shared by nothing else.
    '''
    return Evaluator()
