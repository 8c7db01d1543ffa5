"""
mathcheck parser package.

Tokenization, AST construction and AST visitors for student answers. The
grammar (operators, functions, parentheses, names) comes from a
``mathcheck.math.Context``.
"""

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
from .parser import Parser
from .tokenizer import Token, TokenType, Tokenizer

__all__ = [
    "ASTNode",
    "Number",
    "Variable",
    "Constant",
    "String",
    "BinaryOp",
    "UnaryOp",
    "FunctionCall",
    "List",
    "Point",
    "Vector",
    "Matrix",
    "Interval",
    "Set",
    "Token",
    "TokenType",
    "Tokenizer",
    "Parser",
]
