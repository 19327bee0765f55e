from contextlib import contextmanager
from decimal import Decimal
from functools import reduce
import operator

import regex

from .util import (InvalidNumber, MultipleDecimalPoints, NestingTooDeep,
                   UnexpectedCharacter, wrap_user_errors)


class Cursor:
    '''
    Scan position over one normalized expression.

    One cursor is created per evaluation and handed to every grammar level,
    so they all see, and advance, the same position. It never moves back.
    '''

    def __init__(self, buffer, max_depth=None):
        self.buffer = buffer
        self.position = 0
        self.depth = 0
        self.max_depth = max_depth

    @property
    def at_end(self):
        return self.position >= len(self.buffer)

    def peek(self):
        '''
        Return the character under the cursor, None at the end.
        '''
        if self.at_end:
            return None
        return self.buffer[self.position]

    def advance(self, n=1):
        self.position = min(self.position + n, len(self.buffer))

    def accept(self, *chars):
        '''
        Consume and return the current character if it is one of chars.

        Returns None, without moving, otherwise.
        '''
        char = self.peek()
        if char is not None and char in chars:
            self.advance()
            return char
        return None

    @contextmanager
    def nested(self):
        '''
        Count one more level of nesting (group, root or exponent) while in
        the block.
        '''
        if self.max_depth is not None and self.depth >= self.max_depth:
            raise NestingTooDeep('Expression nested deeper than {} levels '
                                 'at position {} in {!r}'.format(
                                     self.max_depth, self.position,
                                     self.buffer),
                                 position=self.position,
                                 expression=self.buffer)
        self.depth += 1
        try:
            yield self
        finally:
            self.depth -= 1

    def __repr__(self):
        return '{}({!r}, position={})'.format(type(self).__name__,
                                              self.buffer, self.position)


@wrap_user_errors('Cannot parse {0!r} as a decimal', error=InvalidNumber)
def to_decimal(text):
    '''
    Exact conversion of literal text, no float in between.
    '''
    return Decimal(text)


class Lexer:
    '''
    Lexer for the calculator's token alphabet.

    Holds no state of its own; the scan position lives in a Cursor.
    '''
    SQRT = '\N{SQUARE ROOT}'
    OPERATORS = '+-*/^'
    OPEN = '('
    CLOSE = ')'
    POINT = '.'

    # Alternate glyphs mapped onto the canonical operators.
    TRANSLATIONS = {
        '\N{MULTIPLICATION SIGN}': '*',
        '\N{DOT OPERATOR}': '*',
        '\N{ASTERISK OPERATOR}': '*',
        'x': '*',
        '\N{DIVISION SIGN}': '/',
        '\N{DIVISION SLASH}': '/',
    }

    SPACE = r'\s+'
    # Digits and points together, so 1..2 is one bad literal rather than 1.
    # followed by .2
    NUMBER = r'''
              [\d.]+
              '''
    OPERATOR = r'[' + regex.escape(OPERATORS) + r']'
    ALPHABET = r'''
                (?:
                    [\d.]
                    |
                ''' + OPERATOR + r'''
                    |
                    [()''' + SQRT + r''']
                )
                '''

    # All possible tokens.
    LEXEME = r'(?<number>' + NUMBER + r')|' \
             r'(?<operator>' + OPERATOR + r')|' \
             r'(?<sqrt>' + SQRT + r')|' \
             r'(?<open>\()|' \
             r'(?<close>\))'
    # Default regex flags for matching tokens
    FLAGS = reduce(operator.__or__,
                   {regex.POSIX,
                    regex.VERSION1,
                    regex.VERBOSE},
                   0)

    def __init__(self):
        flags = type(self).FLAGS
        self._space = regex.compile(type(self).SPACE, flags=flags)
        self._number = regex.compile(type(self).NUMBER, flags=flags)
        self._alphabet = regex.compile(type(self).ALPHABET, flags=flags)
        self._lexeme = regex.compile(type(self).LEXEME, flags=flags)

    def normalize(self, raw):
        '''
        Map alternate glyphs to canonical operators and drop all whitespace.
        '''
        for glyph, canonical in type(self).TRANSLATIONS.items():
            raw = raw.replace(glyph, canonical)
        return self._space.sub('', raw)

    def isalphabet(self, char):
        '''
        Return True if char can appear in a well-formed expression.
        '''
        return self._alphabet.fullmatch(char) is not None

    def number(self, cursor):
        '''
        Scan the number literal under the cursor, advancing past it.
        '''
        start = cursor.position
        match = self._number.match(cursor.buffer, start)
        if match is None:
            char = cursor.peek()
            if char is not None and not self.isalphabet(char):
                raise UnexpectedCharacter(
                    'Unexpected character {!r} at position {} in {!r}'.format(
                        char, start, cursor.buffer),
                    position=start,
                    expression=cursor.buffer)
            raise InvalidNumber(
                'Invalid number at position {} in {!r}'.format(
                    start, cursor.buffer),
                position=start,
                expression=cursor.buffer)
        text = match.group()
        if text.count(type(self).POINT) > 1:
            raise MultipleDecimalPoints(
                'Multiple decimal points in {!r} at position {}'.format(
                    text, start),
                position=start,
                expression=cursor.buffer)
        if text == type(self).POINT:
            raise InvalidNumber(
                'Invalid number at position {} in {!r}: no digits'.format(
                    start, cursor.buffer),
                position=start,
                expression=cursor.buffer)
        cursor.advance(len(text))
        return to_decimal(text)

    def lex(self, line):
        '''
        Normalize a line and yield a match for each token.

        Raises on the first character that is not a token.
        '''
        buffer = self.normalize(line)
        position = 0
        while position < len(buffer):
            match = self._lexeme.match(buffer, position)
            if match is None:
                raise UnexpectedCharacter(
                    'Unexpected character {!r} at position {} in {!r}'.format(
                        buffer[position], position, buffer),
                    position=position,
                    expression=buffer)
            yield match
            position = match.end()

    def matchedgroups(self, match):
        '''
        Return the named groups a token match actually matched.
        '''
        return {key: value
                for key, value
                in match.groupdict().items()
                if value}


def normalize(raw):
    return Lexer().normalize(raw)
