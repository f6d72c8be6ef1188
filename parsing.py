"""
Solver {
  Expr = Additive
  Additive = Multiplicative (("+" | "-") Multiplicative)*
  Multiplicative = Factorial (("*" | "/" | "%") Factorial)*
  Factorial = Implicit bangs?
  Implicit = Exponent (<implicit> Exponent)*
  Exponent = Unary ("^" Unary)*
  Unary = "-" Primary | Primary
  Primary = numlit | "(" Expr ")"
  numlit = (digit | ".")+
  bangs = "!"+
}

"(", "[" and "{" all open a group and ")", "]" and "}" all close one. The
<implicit> operator is never written; it is inserted between `)(`, `2(` and
`)2` by insert_implicit_multiply().
"""
from abc import ABCMeta

from diagnostics import ErrorKind, EvaluationError

PLUS = '+'
MINUS = '-'
MULTIPLY = '*'
DIVIDE = '/'
MODULO = '%'
EXPONENT = '^'
IMPLICIT_MULTIPLY = 'implicit'

BINARY_SYMBOLS = {
    '+': PLUS,
    '*': MULTIPLY,
    '/': DIVIDE,
    '%': MODULO,
    '^': EXPONENT,
}

LEFT_PARENS = '([{'
RIGHT_PARENS = ')]}'
NUMBER_CHARS = '0123456789.'


def format_number(value: float) -> str:
    """Render a number the way it is shown in diagnostics: `53`, `5.3`, `inf`."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


class TokenBase(metaclass=ABCMeta):

    def __init__(self, lexeme, value):
        # Text used when an expression is rebuilt from its tokens.
        self.lexeme = lexeme
        self.value = value

    def __str__(self):
        return f'{self.__class__.__name__}({self.value})'

    __repr__ = __str__

    def __eq__(self, other):
        return type(self) == type(other) and self.value == other.value

    def __hash__(self):
        return hash((type(self), self.value))


class Number(TokenBase):

    def __init__(self, value: float):
        value = float(value)
        super().__init__(format_number(value), value)


class Binary(TokenBase):

    def __init__(self, op: str):
        lexeme = '' if op == IMPLICIT_MULTIPLY else op
        super().__init__(lexeme, op)


class Negative(TokenBase):

    def __init__(self):
        super().__init__('-', '-')


class Factorial(TokenBase):
    """`degree` consecutive `!` characters, always at least one."""

    def __init__(self, degree: int):
        assert degree >= 1, f'Factorial degree must be positive, got {degree}'
        super().__init__('!' * degree, degree)

    @property
    def degree(self):
        return self.value


class LeftParen(TokenBase):

    def __init__(self):
        super().__init__('(', '(')


class RightParen(TokenBase):

    def __init__(self):
        super().__init__(')', ')')


class Scanner:

    def __init__(self, input, strict_numbers=False, enable_debug=False):
        self.input = input
        self.curr = 0
        self.tokens = []
        self.strict_numbers = strict_numbers
        self.enable_debug = enable_debug

    def eof(self):
        return self.curr >= self.input_len()

    # Must check eof() before calling.
    def curr_char(self):
        return self.input[self.curr]

    def advance(self, by=1):
        if not self.eof():
            self.curr += by

    def input_len(self):
        return len(self.input)

    def scan(self):
        self.tokens = []
        while (token := self.next_token()) is not None:
            self.tokens.append(token)
        self.debug(f'scanned {self.tokens}')
        return self.tokens

    def debug(self, msg):
        if self.enable_debug:
            print('[debug:scanner] ' + msg)

    def next_token(self):
        while not self.eof() and self.curr_char().isspace():
            self.curr += 1

        if self.eof():
            return None

        start = self.curr
        ch = self.curr_char()
        if ch in NUMBER_CHARS:
            return self.number_literal()
        if ch == '!':
            return self.factorial()
        if ch == '-':
            self.advance()
            # Binary only when it follows an operand.
            if self.tokens and isinstance(self.tokens[-1], (Number, RightParen)):
                return Binary(MINUS)
            return Negative()
        if ch in BINARY_SYMBOLS:
            self.advance()
            return Binary(BINARY_SYMBOLS[ch])
        if ch in LEFT_PARENS:
            self.advance()
            return LeftParen()
        if ch in RIGHT_PARENS:
            self.advance()
            return RightParen()

        raise EvaluationError.from_expression(ErrorKind.INVALID_TOKEN,
                                              self.input, start)

    def number_literal(self):
        self.debug('num?')
        start = self.curr
        while not self.eof() and self.curr_char() in NUMBER_CHARS:
            self.advance()
        lexeme = self.input[start:self.curr]
        try:
            value = float(lexeme)
        except ValueError:
            # "1.2.3" and "." fall through here.
            if self.strict_numbers:
                raise EvaluationError.from_expression(
                    ErrorKind.INVALID_TOKEN, self.input, start) from None
            self.debug(f'malformed number {lexeme!r} at {start}, using 0')
            value = 0.0
        return Number(value)

    def factorial(self):
        start = self.curr
        while not self.eof() and self.curr_char() == '!':
            self.advance()
        return Factorial(self.curr - start)


def lex(text, strict_numbers=False, enable_debug=False):
    """Return the list of tokens in `text`.

    Raises EvaluationError(InvalidToken) on an unrecognized character.
    """
    return Scanner(text, strict_numbers=strict_numbers,
                   enable_debug=enable_debug).scan()


def check_balance(tokens):
    """Raise unless every group opened in `tokens` is closed, in order."""
    depth = 0
    for index, token in enumerate(tokens):
        if isinstance(token, LeftParen):
            depth += 1
        elif isinstance(token, RightParen):
            depth -= 1
        if depth < 0:
            raise EvaluationError.from_tokens(ErrorKind.TOO_MANY_RIGHT_PAREN,
                                              tokens, index)
    if depth > 0:
        raise EvaluationError.from_tokens(ErrorKind.TOO_MANY_LEFT_PAREN,
                                          tokens, len(tokens) - 1)


def _implies_multiplication(left, right):
    if isinstance(left, RightParen):
        return isinstance(right, (LeftParen, Number))
    return isinstance(left, Number) and isinstance(right, LeftParen)


def insert_implicit_multiply(tokens):
    """Return a copy of `tokens` with an implicit multiply inside `)(`, `2(` and `)2`."""
    result = []
    for token in tokens:
        if result and _implies_multiplication(result[-1], token):
            result.append(Binary(IMPLICIT_MULTIPLY))
        result.append(token)
    return result
