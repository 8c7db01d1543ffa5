"""
Pratt parser for student answers.

Builds an AST from the token stream using the precedence and associativity
the Context assigns to each operator. Delimited groups are turned into
Points, Vectors, Matrices, Intervals, Sets or Lists according to the
context's parenthesis table.
"""

from typing import Optional

from mathcheck.core.errors import ParseError

from .ast import (
    ASTNode,
    BinaryOp,
    Constant,
    FunctionCall,
    Interval,
    List,
    Matrix,
    Number,
    Point,
    Set,
    String,
    UnaryOp,
    Variable,
    Vector,
)
from .tokenizer import Token, TokenType, Tokenizer

# Expected types that ask for "(a, b)" to be read as an interval
_INTERVAL_TYPES = ("Interval", "Union", "Set")

_STRUCTURES = (List, Point, Vector, Matrix, Interval, Set)


class Parser:
    """
    Recursive descent parser with operator precedence (Pratt parsing).

    Examples:
        >>> Parser(get_context("Numeric")).parse("2x + 1")
        BinaryOp(BinaryOp(Number(2.0), '', Variable('x')), '+', Number(1.0))
    """

    def __init__(self, context):
        self.context = context
        self.tokens: list[Token] = []
        self.pos = 0
        self.expected: Optional[str] = None

    def parse(self, expression: str, expected: Optional[str] = None) -> ASTNode:
        """
        Parse an answer to an AST.

        Args:
            expression: The text to parse
            expected: Type name the caller expects ("Interval", "List", ...);
                used to resolve notation that is ambiguous in the context

        Returns:
            Root AST node; top level commas produce an implicit List

        Raises:
            ParseError: If the text is not a valid formula in the context
        """
        self.tokens = Tokenizer(self.context).tokenize(expression)
        self.pos = 0
        self.expected = expected

        if self.current().type == TokenType.EOF:
            raise ParseError("Your answer is empty", 0)

        first = self.parse_expression(0)
        if self.current().type == TokenType.COMMA:
            elements = [first]
            while self.current().type == TokenType.COMMA:
                self.advance()
                elements.append(self.parse_expression(0))
            root: ASTNode = List(elements).at(first.pos)
        else:
            root = first

        token = self.current()
        if token.type != TokenType.EOF:
            if token.type == TokenType.CLOSE:
                raise ParseError(f"Unmatched '{token.value}'", token.pos, token.value)
            raise ParseError(f"Unexpected '{token.value}'", token.pos, token.value)
        return root

    # Token stream

    def current(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        token = self.current()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return token

    def expect_close(self, open_token: Token) -> Token:
        token = self.current()
        if token.type == TokenType.CLOSE:
            return self.advance()
        if token.type == TokenType.EOF:
            raise ParseError(f"Missing close parenthesis for '{open_token.value}'", open_token.pos, open_token.value)
        raise ParseError(f"Unexpected '{token.value}'", token.pos, token.value)

    # Expressions

    def is_binary_operator(self, token: Token) -> bool:
        return token.type == TokenType.OPERATOR and token.value in self.context.operators

    def parse_expression(self, min_precedence: int = 0) -> ASTNode:
        """Parse an expression by precedence climbing."""
        left = self.parse_prefix()

        while True:
            token = self.current()
            if not self.is_binary_operator(token):
                break
            precedence = self.context.get_operator_precedence(token.value)
            if precedence < min_precedence:
                break

            op_token = self.advance()
            if self.current().type in (TokenType.EOF, TokenType.CLOSE, TokenType.COMMA):
                raise ParseError(f"Missing operand after '{op_token.value}'", op_token.pos, op_token.value)
            assoc = self.context.get_operator_associativity(op_token.value)
            right = self.parse_expression(precedence + (1 if assoc == "left" else 0))

            if op_token.value == "U":
                left, right = self._as_interval(left), self._as_interval(right)
            left = BinaryOp(left, op_token.value, right).at(left.pos)

        return left

    def parse_prefix(self) -> ASTNode:
        token = self.current()
        if token.type == TokenType.OPERATOR and token.value in ("-", "+"):
            self.advance()
            if self.current().type in (TokenType.EOF, TokenType.CLOSE, TokenType.COMMA):
                raise ParseError(f"Missing operand after '{token.value}'", token.pos, token.value)
            precedence = self.context.get_operator_precedence(token.value, is_unary=True)
            operand = self.parse_expression(precedence)
            return UnaryOp(token.value, operand).at(token.pos)
        return self.parse_atom()

    def parse_atom(self) -> ASTNode:
        token = self.current()

        if token.type == TokenType.NUMBER:
            self.advance()
            return Number(float(token.value)).at(token.pos)
        if token.type == TokenType.STRING:
            self.advance()
            return String(token.value).at(token.pos)
        if token.type == TokenType.CONSTANT:
            self.advance()
            return Constant(token.value).at(token.pos)
        if token.type == TokenType.VARIABLE:
            self.advance()
            return Variable(token.value).at(token.pos)
        if token.type == TokenType.FUNCTION:
            return self.parse_function_call()
        if token.type == TokenType.OPEN:
            return self.parse_delimited()

        if token.type == TokenType.EOF:
            raise ParseError("Unexpected end of answer", token.pos)
        if token.type == TokenType.OPERATOR:
            raise ParseError(f"Missing operand before '{token.value}'", token.pos, token.value)
        raise ParseError(f"Unexpected '{token.value}'", token.pos, token.value)

    def parse_function_call(self) -> FunctionCall:
        """Parse func(arg1, arg2, ...) and check the number of inputs."""
        func_token = self.advance()
        open_token = self.advance()

        args: list[ASTNode] = []
        if self.current().type != TokenType.CLOSE:
            args.append(self.parse_expression(0))
            while self.current().type == TokenType.COMMA:
                self.advance()
                args.append(self.parse_expression(0))
        close_token = self.expect_close(open_token)
        if close_token.value != ")":
            raise ParseError(f"Mismatched parentheses: '(' and '{close_token.value}'", close_token.pos, close_token.value)

        nargs = self.context.functions.get(func_token.value)["nargs"]
        if len(args) > nargs:
            raise ParseError(f"Function '{func_token.value}' has too many inputs", func_token.pos, func_token.value)
        if len(args) < nargs:
            raise ParseError(f"Function '{func_token.value}' has too few inputs", func_token.pos, func_token.value)
        return FunctionCall(func_token.value, args).at(func_token.pos)

    # Delimited groups

    def parse_delimited(self) -> ASTNode:
        open_token = self.advance()
        open_char = open_token.value

        if open_char == "|":
            inner = self.parse_expression(0)
            close_token = self.expect_close(open_token)
            if close_token.value != "|":
                raise ParseError(f"Mismatched parentheses: '|' and '{close_token.value}'", close_token.pos, close_token.value)
            return FunctionCall("abs", [inner]).at(open_token.pos)

        paren = self.context.parens.get(open_char)

        if paren["type"] == "Matrix" and self.current().type == TokenType.OPEN and self.current().value == "[":
            rows = self._parse_matrix_rows(open_token)
            if rows is not None:
                return rows

        elements: list[ASTNode] = []
        if self.current().type != TokenType.CLOSE:
            elements.append(self.parse_expression(0))
            while self.current().type == TokenType.COMMA:
                self.advance()
                elements.append(self.parse_expression(0))
        close_token = self.expect_close(open_token)
        return self._resolve(open_token, close_token, elements)

    def _resolve(self, open_token: Token, close_token: Token, elements: list[ASTNode]) -> ASTNode:
        """Turn a delimited group into the node its parenthesis type calls for."""
        open_char, close_char = open_token.value, close_token.value
        paren = self.context.parens.get(open_char)
        kind, form_interval = paren["type"], paren.get("formInterval", False)
        pos = open_token.pos

        if close_char != paren["close"]:
            if (
                open_char in "(["
                and close_char in ")]"
                and form_interval
                and len(elements) == 2
            ):
                return Interval(elements[0], elements[1], open_char == "(", close_char == ")").at(pos)
            raise ParseError(
                f"Mismatched parentheses: '{open_char}' and '{close_char}'", close_token.pos, close_char
            )

        if not elements:
            if kind == "Set":
                return Set([]).at(pos)
            raise ParseError("Empty parentheses", close_token.pos, close_char)

        if len(elements) == 1 and kind not in ("Set", "Vector"):
            return elements[0]

        if kind == "Interval":
            if len(elements) == 2:
                return Interval(elements[0], elements[1], open_char == "(", close_char == ")").at(pos)
            return List(elements, open_char, close_char).at(pos)

        if kind == "Point":
            if self.expected in _INTERVAL_TYPES and form_interval and len(elements) == 2:
                return Interval(elements[0], elements[1], True, True).at(pos)
            return Point(elements).at(pos)

        if kind == "Vector":
            return Vector(elements).at(pos)

        if kind == "Set":
            return Set(elements).at(pos)

        if kind == "Matrix":
            if form_interval and len(elements) == 2 and self.expected != "Matrix":
                return Interval(elements[0], elements[1], False, False).at(pos)
            if any(isinstance(e, _STRUCTURES) for e in elements):
                return List(elements, open_char, close_char).at(pos)
            return Matrix([elements]).at(pos)

        return List(elements, open_char, close_char).at(pos)

    def _parse_matrix_rows(self, open_token: Token) -> Optional[ASTNode]:
        """
        Parse [[a, b], [c, d]] as matrix rows.

        Returns None (with the stream rewound) when the contents are not all
        bracketed rows, so the group is parsed as an ordinary list.
        """
        start = self.pos
        rows: list[list[ASTNode]] = []
        while True:
            row_open = self.current()
            if row_open.type != TokenType.OPEN or row_open.value != "[":
                self.pos = start
                return None
            self.advance()
            row = [self.parse_expression(0)]
            while self.current().type == TokenType.COMMA:
                self.advance()
                row.append(self.parse_expression(0))
            row_close = self.expect_close(row_open)
            if row_close.value != "]":
                self.pos = start
                return None
            rows.append(row)
            if self.current().type == TokenType.COMMA:
                self.advance()
                continue
            break

        if self.current().type != TokenType.CLOSE:
            self.pos = start
            return None
        close_token = self.advance()
        if close_token.value != "]":
            raise ParseError(f"Mismatched parentheses: '[' and '{close_token.value}'", close_token.pos, close_token.value)
        if any(len(row) != len(rows[0]) for row in rows):
            raise ParseError("Matrix rows must all be the same length", open_token.pos, "[")
        return Matrix(rows).at(open_token.pos)

    def _as_interval(self, node: ASTNode) -> ASTNode:
        """Read a two-coordinate point or row as an interval (operand of U)."""
        if isinstance(node, Point) and len(node.coords) == 2:
            paren = self.context.parens.get("(")
            if paren and paren.get("formInterval"):
                return Interval(node.coords[0], node.coords[1], True, True).at(node.pos)
        if isinstance(node, Matrix) and len(node.rows) == 1 and len(node.rows[0]) == 2:
            paren = self.context.parens.get("[")
            if paren and paren.get("formInterval"):
                return Interval(node.rows[0][0], node.rows[0][1], False, False).at(node.pos)
        return node
