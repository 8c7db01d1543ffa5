"""
Tokenizer for student answers.

Regex-based tokenization driven by the Context: only the operators,
parentheses and names the context defines are accepted, so that a problem
which removes ``*`` or disables ``sqrt`` rejects answers using them while
tokenizing rather than after evaluation.

Implicit multiplication is made explicit here: juxtaposed operands get an
operator token whose value is ``""`` when they touch (``2x``) or ``" "`` when
whitespace separates them (``2 x``). Each form must be defined in the context.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from mathcheck.core.errors import ParseError

if TYPE_CHECKING:
    from mathcheck.math.context import Context


class TokenType(Enum):
    """Token types for math answers."""

    NUMBER = auto()
    VARIABLE = auto()
    CONSTANT = auto()
    STRING = auto()
    FUNCTION = auto()
    OPERATOR = auto()
    OPEN = auto()
    CLOSE = auto()
    COMMA = auto()
    EOF = auto()


@dataclass
class Token:
    """
    A single token of the answer.

    Attributes:
        type: The token type
        value: The text of the token (operator tokens use the context's key)
        pos: 0-based position in the source string
        space_before: True when whitespace precedes the token
    """

    type: TokenType
    value: str
    pos: int
    space_before: bool = False

    def __repr__(self) -> str:
        return f"Token({self.type.name}, '{self.value}', pos={self.pos})"


# Tokens that can end an operand, and tokens that can start one
_OPERAND_END = (TokenType.NUMBER, TokenType.VARIABLE, TokenType.CONSTANT, TokenType.CLOSE)
_OPERAND_START = (
    TokenType.NUMBER,
    TokenType.VARIABLE,
    TokenType.CONSTANT,
    TokenType.FUNCTION,
    TokenType.OPEN,
)


class Tokenizer:
    """
    Tokenizes answers using context-aware regex patterns.

    Handles numbers, names (variables, constants, functions, strings and the
    ``U`` union operator), operators, the context's parenthesis styles and
    implicit multiplication.
    """

    PATTERNS = {
        "NUMBER": r"\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?",
        "NAME": r"[a-zA-Z][a-zA-Z0-9_]*",
        # Longer operators first
        "OPERATOR": r"\*\*|//|><|[-+*/^.]",
        "PAREN": r"[()\[\]{}<>|]",
        "COMMA": r",",
        "WHITESPACE": r"\s+",
    }

    def __init__(self, context: "Context"):
        self.context = context
        self.combined_pattern = re.compile(
            "|".join(f"(?P<{name}>{pattern})" for name, pattern in self.PATTERNS.items())
        )

    def tokenize(self, expression: str) -> list[Token]:
        """
        Tokenize an answer.

        Args:
            expression: The student's (or instructor's) text

        Returns:
            List of tokens ending with an EOF token

        Raises:
            ParseError: For characters, names, operators or parentheses the
                context does not allow
        """
        tokens: list[Token] = []
        # Open delimiters seen so far; disambiguates "|" and ">"
        opened: list[str] = []
        pos = 0
        space = False

        while pos < len(expression):
            match = self.combined_pattern.match(expression, pos)
            if not match:
                raise ParseError(f"Unexpected character '{expression[pos]}'", pos, expression[pos])

            kind = match.lastgroup
            value = match.group()
            start = pos
            pos = match.end()

            if kind == "WHITESPACE":
                space = True
                continue

            if value == "><" and opened and opened[-1] == "<":
                # "<1,2>><3,4>": the ">" closes the vector
                kind, value, pos = "PAREN", ">", start + 1

            if kind == "NUMBER":
                token = Token(TokenType.NUMBER, value, start, space)
            elif kind == "NAME":
                token, pos = self._name_token(expression, value, start, space)
            elif kind == "OPERATOR":
                token = self._operator_token(value, start, space, tokens)
            elif kind == "PAREN":
                token = self._paren_token(expression, value, start, space, tokens, opened)
            else:
                token = Token(TokenType.COMMA, value, start, space)

            tokens.append(token)
            space = False

        tokens.append(Token(TokenType.EOF, "", len(expression), space))
        return self._insert_implicit_multiplication(tokens)

    # Names

    def _known_name(self, name: str) -> bool:
        ctx = self.context
        return (
            name in ctx.variables
            or name in ctx.constants
            or name in ctx.functions
            or (name == "U" and "U" in ctx.operators)
        )

    def _name_token(self, expression: str, name: str, start: int, space: bool) -> tuple[Token, int]:
        ctx = self.context

        if not self._known_name(name) and ctx.strings.contains(name):
            return Token(TokenType.STRING, name, start, space), start + len(name)

        if not self._known_name(name):
            # Split runs like "xy" or "2pix" into known names
            prefix = next(
                (name[:end] for end in range(len(name) - 1, 0, -1) if self._known_name(name[:end])),
                None,
            )
            if prefix is None:
                raise ParseError(f"Variable '{name}' is not defined in this context", start, name)
            name = prefix

        end = start + len(name)
        if name == "U" and "U" in ctx.operators and name not in ctx.variables:
            return Token(TokenType.OPERATOR, "U", start, space), end
        if name in ctx.variables:
            return Token(TokenType.VARIABLE, name, start, space), end
        if name in ctx.constants:
            return Token(TokenType.CONSTANT, name, start, space), end

        if not ctx.functions.is_enabled(name):
            raise ParseError(f"Function '{name}' is not allowed in this context", start, name)
        following = end
        while following < len(expression) and expression[following].isspace():
            following += 1
        if following >= len(expression) or expression[following] != "(":
            raise ParseError(f"Function '{name}' must have its input in parentheses", start, name)
        return Token(TokenType.FUNCTION, name, start, space), end

    # Operators

    def _operator_token(self, op: str, start: int, space: bool, tokens: list[Token]) -> Token:
        operators = self.context.operators
        binary = bool(tokens) and tokens[-1].type in _OPERAND_END
        if binary:
            if op not in operators:
                raise ParseError(f"Operator '{op}' is not allowed in this context", start, op)
        elif f"u{op}" not in operators:
            if op in operators:
                raise ParseError(f"Missing operand before '{op}'", start, op)
            raise ParseError(f"Operator '{op}' is not allowed in this context", start, op)
        return Token(TokenType.OPERATOR, op, start, space)

    # Parentheses

    def _paren_token(
        self,
        expression: str,
        char: str,
        start: int,
        space: bool,
        tokens: list[Token],
        opened: list[str],
    ) -> Token:
        parens = self.context.parens
        after_operand = bool(tokens) and tokens[-1].type in _OPERAND_END

        if char == "|":
            if "|" not in parens:
                raise ParseError("Absolute value bars are not allowed in this context", start, char)
            if opened and opened[-1] == "|" and after_operand:
                opened.pop()
                return Token(TokenType.CLOSE, char, start, space)
            opened.append(char)
            return Token(TokenType.OPEN, char, start, space)

        if char == "(" and tokens and tokens[-1].type == TokenType.FUNCTION:
            opened.append(char)
            return Token(TokenType.OPEN, char, start, space)

        if char in parens:
            opened.append(char)
            return Token(TokenType.OPEN, char, start, space)

        if parens.is_close(char) or (char == ")" and "(" in opened):
            # "(" and "[" close each other to form intervals, so any close
            # matches the innermost opener
            if not opened:
                raise ParseError(f"Unmatched '{char}'", start, char)
            opened.pop()
            return Token(TokenType.CLOSE, char, start, space)

        if char in "([{<":
            raise ParseError(f"Parenthesis '{char}' is not allowed in this context", start, char)
        raise ParseError(f"Unexpected character '{char}'", start, char)

    # Implicit multiplication

    def _insert_implicit_multiplication(self, tokens: list[Token]) -> list[Token]:
        """
        Insert implicit multiplication operator tokens.

        Examples:
        - 2x       -> 2 "" x
        - 2 x      -> 2 " " x
        - (x+1)(x-1) -> (x+1) "" (x-1)
        - x sin(x) -> x " " sin(x)
        """
        operators = self.context.operators
        result: list[Token] = []

        for i, token in enumerate(tokens):
            if i > 0 and tokens[i - 1].type in _OPERAND_END and token.type in _OPERAND_START:
                op = " " if token.space_before else ""
                if op not in operators:
                    raise ParseError(
                        "Implicit multiplication is not allowed in this context; use an explicit operator",
                        token.pos,
                        token.value,
                    )
                result.append(Token(TokenType.OPERATOR, op, token.pos, token.space_before))
            result.append(token)

        return result
