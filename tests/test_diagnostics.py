import unittest
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from diagnostics import ErrorKind, EvaluationError
from parsing import lex, Number, Binary, Factorial, IMPLICIT_MULTIPLY, PLUS


class TestEvaluationError(unittest.TestCase):
    def test_caret_before_message(self):
        err = EvaluationError.from_expression(ErrorKind.INVALID_TOKEN,
                                              "5 & 3", 2)
        self.assertEqual(str(err), "5 & 3\n  ^Invalid token")

    def test_message_before_caret(self):
        expression = "1 + 2 + 3 + 4 + 5 + 6 $"
        err = EvaluationError.from_expression(ErrorKind.INVALID_TOKEN,
                                              expression, 22)
        lines = str(err).splitlines()
        self.assertEqual(lines[0], expression)
        self.assertEqual(lines[1], "         Invalid token^")
        self.assertEqual(lines[1].index('^'), 22)

    def test_from_tokens_rebuilds_text(self):
        tokens = lex("2 * (3 + 4.5))")
        err = EvaluationError.from_tokens(ErrorKind.TOO_MANY_RIGHT_PAREN,
                                          tokens, 7)
        self.assertEqual(err.expression, "2*(3+4.5))")
        self.assertEqual(err.index, 9)
        self.assertEqual(str(err).splitlines()[1],
                         " " * 9 + "^Too many right parentheses")

    def test_from_tokens_special_tokens(self):
        tokens = [Number(2), Binary(IMPLICIT_MULTIPLY), Number(3),
                  Factorial(2), Binary(PLUS)]
        err = EvaluationError.from_tokens(ErrorKind.UNEXPECTED_TOKEN, tokens,
                                          4)
        self.assertEqual(err.expression, "23!!+")
        self.assertEqual(err.index, 4)

    def test_from_tokens_past_end(self):
        err = EvaluationError.from_tokens(ErrorKind.UNEXPECTED_TOKEN,
                                          lex("12 *"), 2)
        self.assertEqual(err.expression, "12*")
        self.assertEqual(err.index, 3)

    def test_from_no_tokens(self):
        err = EvaluationError.from_tokens(ErrorKind.UNEXPECTED_TOKEN, [], 0)
        self.assertEqual(str(err), "\n^Unexpected token")

    def test_attributes(self):
        err = EvaluationError.from_expression(ErrorKind.DIVISION_BY_ZERO,
                                              "1/0", 1)
        self.assertEqual(err.kind, ErrorKind.DIVISION_BY_ZERO)
        self.assertEqual(err.message, "Division by zero")
        self.assertIsInstance(err, Exception)

    def test_every_kind_has_a_message(self):
        kinds = [
            value for name, value in vars(ErrorKind).items()
            if not name.startswith('_')
        ]
        self.assertEqual(len(kinds), 7)
        for kind in kinds:
            self.assertTrue(EvaluationError(kind, "", 0).message)


if __name__ == '__main__':
    unittest.main()
