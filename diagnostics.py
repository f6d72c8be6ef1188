"""Errors raised while evaluating an expression.

Every failure is an `EvaluationError` whose string form is a two-line caret
diagnostic:

    2*(3+4))
           ^Too many right parentheses

"""


class ErrorKind:
    INVALID_TOKEN = 'InvalidToken'
    TOO_MANY_LEFT_PAREN = 'TooManyLeftParen'
    TOO_MANY_RIGHT_PAREN = 'TooManyRightParen'
    UNEXPECTED_TOKEN = 'UnexpectedToken'
    DIVISION_BY_ZERO = 'DivisionByZero'
    INVALID_FACTORIAL = 'InvalidFactorial'
    NESTING_TOO_DEEP = 'NestingTooDeep'


MESSAGES = {
    ErrorKind.INVALID_TOKEN: 'Invalid token',
    ErrorKind.TOO_MANY_LEFT_PAREN: 'Too many left parentheses',
    ErrorKind.TOO_MANY_RIGHT_PAREN: 'Too many right parentheses',
    ErrorKind.UNEXPECTED_TOKEN: 'Unexpected token',
    ErrorKind.DIVISION_BY_ZERO: 'Division by zero',
    ErrorKind.INVALID_FACTORIAL: 'Factorial of a negative or non-integral value',
    ErrorKind.NESTING_TOO_DEEP: 'Parentheses nested too deeply',
}


class EvaluationError(Exception):
    """An expression could not be evaluated.

    `expression` is the text shown on the first line of the diagnostic and
    `index` is the column the caret points at.
    """

    def __init__(self, kind: str, expression: str, index: int):
        self.kind = kind
        self.expression = expression
        self.index = index
        super().__init__(self.render())

    @property
    def message(self) -> str:
        return MESSAGES[self.kind]

    @classmethod
    def from_expression(cls, kind: str, expression: str, index: int):
        """Point at character `index` of the raw source text."""
        return cls(kind, expression, index)

    @classmethod
    def from_tokens(cls, kind: str, tokens, token_index: int):
        """Point at `tokens[token_index]`, reconstructing the text from tokens.

        An index past the last token points just after the reconstructed text.
        """
        buffer = ''
        column = None
        for i, token in enumerate(tokens):
            if i == token_index:
                column = len(buffer)
            buffer += token.lexeme
        if column is None:
            column = len(buffer)
        return cls(kind, buffer, column)

    def render(self) -> str:
        message = self.message
        if len(message) <= self.index:
            info = ' ' * (self.index - len(message)) + message + '^'
        else:
            info = ' ' * self.index + '^' + message
        return f'{self.expression}\n{info}'

    def __repr__(self):
        return f'EvaluationError({self.kind}, index={self.index})'
