"""Evaluator for arithmetic expressions.

This module can be used programmatically via evaluate(), but can also be run
directly. With no arguments it reads one expression from stdin:

    $ echo '(1 + 2)(3 + 4)' | python interp.py
    Evaluation: 21.0

To evaluate every line of a file,

    $ python interp.py -i INPUT_FILE

To start a REPL,

    $ python interp.py -r

"""

import sys
import math
import argparse
from parsing import (lex, check_balance, insert_implicit_multiply, Binary,
                     Negative, Factorial, Number, LeftParen, RightParen, PLUS,
                     MINUS, MULTIPLY, DIVIDE, MODULO, EXPONENT,
                     IMPLICIT_MULTIPLY)
from diagnostics import ErrorKind, EvaluationError

# Each level of parentheses costs about a dozen Python frames.
DEFAULT_MAX_DEPTH = 50


def _add(l: float, r: float) -> float:
    return l + r


def _sub(l: float, r: float) -> float:
    return l - r


def _mul(l: float, r: float) -> float:
    return l * r


def _div(l: float, r: float) -> float:
    """Return `l / r`.

    Requires `r` to be non-zero; the caller reports division by zero.
    """
    return l / r


def _mod(l: float, r: float) -> float:
    """Return the remainder of `l / r` truncated toward zero, like C's fmod.

    Requires `r` to be non-zero. An infinite `l` gives nan.
    """
    try:
        return math.fmod(l, r)
    except ValueError:
        return math.nan


def _pow(l: float, r: float) -> float:
    """Return `l` raised to the `r`th power with IEEE results instead of exceptions.

    Overflow gives +/-inf, a negative base with a fractional exponent gives
    nan and zero raised to a negative power gives +/-inf.
    """
    try:
        return math.pow(l, r)
    except OverflowError:
        if l < 0 and r.is_integer() and r % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        if l == 0:
            if math.copysign(1, l) < 0 and r.is_integer() and r % 2 == 1:
                return -math.inf
            return math.inf
        return math.nan


# Op table for binary operations; operator => func(lhs, rhs)
BINARY_OPS = {
    PLUS: _add,
    MINUS: _sub,
    MULTIPLY: _mul,
    DIVIDE: _div,
    MODULO: _mod,
    EXPONENT: _pow,
    IMPLICIT_MULTIPLY: _mul,
}

ZERO_CHECKED_OPS = (DIVIDE, MODULO)


def falling_factorial(value: float, degree: int) -> float:
    """Return value * (value - degree) * (value - 2*degree) * ... over the terms > 1.

    degree=1 is the ordinary factorial, degree=2 the double factorial and so
    on. Assumes `value` is a finite non-negative integer. Once the product
    overflows the result saturates at inf.
    """
    result = 1.0
    term = value
    while term > 1:
        result *= term
        if math.isinf(result):
            break
        term -= degree
    return result


class Evaluator:
    """Computes the value of a normalized token list in a single pass.

    The tokens must already be balance-checked and have implicit multiplies
    inserted. There is no syntax tree; each precedence level returns the value
    of what it consumed and the cursor only moves forward.
    """

    def __init__(self, tokens, max_depth=DEFAULT_MAX_DEPTH, enable_debug=False):
        self.tokens = tokens
        self.curr = 0
        self.depth = 0
        self.max_depth = max_depth
        self.enable_debug = enable_debug

    def debug(self, msg):
        if self.enable_debug:
            print(f'[debug:eval] {msg}')

    def eof(self):
        return self.curr >= len(self.tokens)

    # Must check eof() before calling.
    def curr_tok(self):
        return self.tokens[self.curr]

    def advance(self, by=1):
        self.curr += by

    def error(self, kind, index):
        return EvaluationError.from_tokens(kind, self.tokens, index)

    def run(self) -> float:
        try:
            value = self.additive()
        except RecursionError:
            # max_depth set beyond what the interpreter stack can hold.
            raise self.error(ErrorKind.NESTING_TOO_DEEP, self.curr) from None
        if not self.eof():
            raise self.error(ErrorKind.UNEXPECTED_TOKEN, self.curr)
        self.debug(f'result {value}')
        return value

    def _fold_binary(self, parse_fn, *ops):
        value = parse_fn()
        while (op := self.match_any(*ops)) is not None:
            op_index = self.curr - 1
            rhs = parse_fn()
            if op.value in ZERO_CHECKED_OPS and rhs == 0:
                raise self.error(ErrorKind.DIVISION_BY_ZERO, op_index)
            lhs = value
            value = BINARY_OPS[op.value](lhs, rhs)
            self.debug(f'{lhs} {op.value} {rhs} = {value}')
        return value

    def additive(self):
        return self._fold_binary(self.multiplicative, Binary(PLUS),
                                 Binary(MINUS))

    def multiplicative(self):
        return self._fold_binary(self.factorial, Binary(MULTIPLY),
                                 Binary(DIVIDE), Binary(MODULO))

    def factorial(self):
        value = self.implicit_multiply()
        if (bang := self.match(Factorial)) is None:
            return value
        if not math.isfinite(value) or value < 0 or not value.is_integer():
            raise self.error(ErrorKind.INVALID_FACTORIAL, self.curr - 1)
        result = falling_factorial(value, bang.degree)
        self.debug(f'{value}{bang.lexeme} = {result}')
        return result

    def implicit_multiply(self):
        return self._fold_binary(self.exponent, Binary(IMPLICIT_MULTIPLY))

    def exponent(self):
        # Left-associative: 2^3^2 == (2^3)^2.
        return self._fold_binary(self.unary, Binary(EXPONENT))

    def unary(self):
        if self.match(Negative) is not None:
            return -self.primary()
        return self.primary()

    def primary(self):
        if (number := self.match(Number)) is not None:
            return number.value
        if not self.eof() and self.check(LeftParen):
            if self.depth >= self.max_depth:
                raise self.error(ErrorKind.NESTING_TOO_DEEP, self.curr)
            self.advance()
            self.depth += 1
            value = self.additive()
            # Balance was checked before evaluation, so the group is closed.
            assert not self.eof(), \
              f'Unclosed group at end of input: {self.tokens}'
            if self.match(RightParen) is None:
                raise self.error(ErrorKind.UNEXPECTED_TOKEN, self.curr)
            self.depth -= 1
            return value
        raise self.error(ErrorKind.UNEXPECTED_TOKEN, self.curr)

    def match_any(self, *toks):
        for tok in toks:
            if (m := self.match(tok)) is not None:
                return m
        return None

    def _check(self, token, token_or_type):
        if isinstance(token_or_type, type):
            return type(token) == token_or_type
        return token == token_or_type

    def check(self, token_or_type):
        return self._check(self.curr_tok(), token_or_type)

    def match(self, tok):
        if self.eof():
            return None
        if not self.check(tok):
            return None
        ret = self.curr_tok()
        self.advance()
        return ret


def evaluate(expression: str,
             max_depth=DEFAULT_MAX_DEPTH,
             strict_numbers=False,
             debug=False) -> float:
    """Evaluate an arithmetic expression and return its value.

    This is the entry point for evaluating text. It lexes, checks that
    parentheses balance, inserts implicit multiplication and then evaluates.
    Raises EvaluationError, whose str() is a caret diagnostic, on any failure.
    """
    tokens = lex(expression, strict_numbers=strict_numbers, enable_debug=debug)
    check_balance(tokens)
    tokens = insert_implicit_multiply(tokens)
    if debug:
        print(f'[debug:parser] normalized {tokens}')
    return Evaluator(tokens, max_depth=max_depth, enable_debug=debug).run()


def _print_error(err, indent='', file=None):
    for line in str(err).splitlines():
        print(f'{indent}{line}', file=file)


def _run_file(inputfile, options):
    with open(inputfile, 'rb') as fp:
        lines = fp.read().decode('utf-8').splitlines()

    status = 0
    for line in lines:
        if not line.strip():
            continue
        print(line)
        try:
            print(f'\tEvaluation: {evaluate(line, **options)}')
        except EvaluationError as err:
            _print_error(err, indent='\t')
            status = 1
    return status


def _repl(options):
    while True:
        try:
            s = input('> ')
        except EOFError:
            print()
            return 0
        if not s.strip():
            continue
        try:
            print(f'Evaluation: {evaluate(s, **options)}')
        except EvaluationError as err:
            _print_error(err)


def main(argv=None):
    argparser = argparse.ArgumentParser(
        'solver',
        description='Evaluate arithmetic expressions',
    )
    argparser.add_argument('-i', '--input')
    argparser.add_argument('-r', '--repl', action='store_true')
    argparser.add_argument('-d', '--debug', action='store_true')
    argparser.add_argument('--max-depth', type=int, default=DEFAULT_MAX_DEPTH)
    argparser.add_argument('--strict-numbers', action='store_true')
    args = argparser.parse_args(argv)

    options = {
        'max_depth': args.max_depth,
        'strict_numbers': args.strict_numbers,
        'debug': args.debug,
    }

    if args.input is not None:
        return _run_file(args.input, options)
    if args.repl:
        return _repl(options)

    expression = sys.stdin.readline().rstrip()
    try:
        value = evaluate(expression, **options)
    except EvaluationError as err:
        _print_error(err, file=sys.stderr)
        return 1
    print(f'Evaluation: {value}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
