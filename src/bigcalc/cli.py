from os import isatty, path
import sys
from decimal import Decimal
from argparse import ArgumentParser, REMAINDER, OPTIONAL
import traceback

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory

from .util import CalcError
from .evaluator import Evaluator
from .lexer import Lexer


class InteractiveInput:
    def __init__(self, prompt, history=None, rprompt=None):
        self.prompt = prompt
        self.history = history
        self.rprompt = rprompt

    def __iter__(self):
        try:
            session = PromptSession(message=self.prompt,
                                    vi_mode=True,
                                    enable_suspend=True,
                                    enable_open_in_editor=True,
                                    # Persistent
                                    history=self.history,
                                    # Last answer
                                    rprompt=self.rprompt,
                                    prompt_continuation=' ' * len(self.prompt),
                                    # Debatable. Interferes with X11 selection.
                                    mouse_support=True,
                                    # Certainly not! But be explicit.
                                    erase_when_done=False)
            while True:
                yield session.prompt()
        except EOFError:
            return


def format_result(value, precision=None, width=None):
    '''
    Render a result for display.

    Plain notation by default, never scientific. With precision, round to that
    many significant digits. With width, fall back to 6 significant digits or
    fewer, scientific if need be, until the text fits.
    '''
    if precision is not None:
        text = '{:.{}g}'.format(value, precision)
    else:
        text = '{:f}'.format(value)
    if width is not None and len(text) > width:
        digits = 6
        text = '{:.{}g}'.format(value, digits)
        while len(text) > width and digits > 1:
            digits -= 1
            text = '{:.{}g}'.format(value, digits)
    return text


def _isatty(stream):
    '''
    Return True if stream is a terminal; False if it has no descriptor at all.
    '''
    try:
        return isatty(stream.fileno())
    except (OSError, ValueError):
        return False


class CLI:
    '''
    Command line interface to the calculator.
    '''

    DEFAULT_PROMPT = '> '
    HISTORY_FILE = '~/.bigcalc_history'
    # Stands for the last successful result in expressions.
    ANSWER = 'ans'
    # Shown instead of a result when an expression fails.
    ERROR = 'Error'

    def dumper(self):
        '''
        Dump the tokens of each expression, with their position.
        '''
        lexer = Lexer()
        print('[kind]\t<repr(token)>\t<position>')
        for line in self.args.expressions:
            try:
                for match in lexer.lex(line):
                    groups = lexer.matchedgroups(match)
                    print(*groups.keys(),
                          repr(match.group()),
                          match.start(),
                          sep='\t')
            except CalcError as e:
                self._report(e)

    def executor(self):
        '''
        Evaluate each expression and print its result.
        '''
        evaluator = Evaluator()
        for line in self.args.expressions:
            result = evaluator.try_evaluate(self.substitute(line))
            if result.ok:
                self.answer = result.value
                print(self.show(result.value))
            else:
                print(self.ERROR)
                self._report(result.error)

    def raw_grammar(self):
        '''
        Print the grammar the evaluator implements.
        '''
        print(Evaluator.GRAMMAR)

    def substitute(self, line):
        '''
        Replace ans with the last answer, parenthesized so signs stay put.
        '''
        return line.replace(self.ANSWER,
                            '({})'.format(format_result(self.answer)))

    def show(self, value):
        return format_result(value,
                             precision=self.args.precision,
                             width=self.args.width)

    def _report(self, error):
        '''
        Print error message to stderr; the whole traceback if verbose.
        '''
        self.failed = True
        if self.args.verbose:
            traceback.print_exception(type(error), error, error.__traceback__,
                                      file=sys.stderr)
        else:
            print(error.args[0], file=sys.stderr)

    def _prompting_input(self):
        '''
        Return prompting stdin.__iter__ decorator...

        If either:
        - prompt explicitly specified.
        - both stdin/out are a tty
        '''
        if self.args.prompt or \
           _isatty(sys.stdin) and _isatty(sys.stdout):
            return InteractiveInput(
                prompt=self.args.prompt or self.DEFAULT_PROMPT,
                history=FileHistory(path.expanduser(self.HISTORY_FILE)),
                rprompt=lambda: '{} = {}'.format(self.ANSWER,
                                                 self.show(self.answer)))
        else:
            return sys.stdin

    def __init__(self):
        '''
        Create ready to run CLI.

        Does not run or parse command line arguments.
        '''
        self.answer = Decimal(0)
        self.failed = False
        self.argument_parser = ArgumentParser(
            description='Infix calculator with exact decimal arithmetic')
        self.argument_parser.add_argument('-v', '--verbose',
                                          action='store_true',
                                          help='show tracebacks on errors')
        self.argument_parser.add_argument('-k', '--precision',
                                          type=int,
                                          help='significant digits shown')
        self.argument_parser.add_argument('-w', '--width',
                                          type=int,
                                          help='shorten results wider than '
                                               'this many characters')
        int_nonint_groups = self.argument_parser.add_mutually_exclusive_group()
        int_nonint_groups.add_argument('-e', '--expression',
                                       nargs=REMAINDER,
                                       dest='expressions')
        int_nonint_groups.add_argument('-p', '--prompt',
                                       nargs=OPTIONAL,
                                       const=self.DEFAULT_PROMPT)
        main_groups = self.argument_parser.add_mutually_exclusive_group()
        for short_, long_, action in [('-G', '--raw-grammar',
                                       self.raw_grammar),
                                      ('-D', '--dump', self.dumper)]:
            main_groups.add_argument(short_, long_,
                                     action='store_const',
                                     const=action,
                                     dest='action')
        self.argument_parser.set_defaults(action=self.executor,
                                          expressions=sys.stdin)

    def _interactive(self):
        return isinstance(self.args.expressions, InteractiveInput)

    def run(self, *, args=None):
        '''
        Run CLI, given these args, or previously passed CLI args.

        Return the exit status: 1 if an expression failed outside of an
        interactive session, 0 otherwise.
        '''
        self.args = self.argument_parser.parse_args(args)
        if self.args.expressions is sys.stdin and \
           self.args.action != self.raw_grammar:
            self.args.expressions = self._prompting_input()
        try:
            self.args.action()
        except KeyboardInterrupt:
            return 1
        if self.failed and not self._interactive():
            return 1
        return 0
