"""Tokens, token kinds and operator binding powers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from phic.source import SrcLocation, SrcSpan


class TokenKind(Enum):
    """Kinds of lexical token, valued by their display text."""

    EOF = "end of file"
    ERROR = "error"
    IDENTIFIER = "identifier"
    INT_LITERAL = "integer literal"
    FLOAT_LITERAL = "float literal"
    STR_LITERAL = "string literal"
    CHAR_LITERAL = "char literal"

    FUN_KW = "fun"
    STRUCT_KW = "struct"
    ENUM_KW = "enum"
    RETURN_KW = "return"
    IF_KW = "if"
    ELSE_KW = "else"
    WHILE_KW = "while"
    FOR_KW = "for"
    IN_KW = "in"
    VAR_KW = "var"
    CONST_KW = "const"
    BREAK_KW = "break"
    CONTINUE_KW = "continue"
    PUBLIC_KW = "public"
    TRUE_KW = "true"
    FALSE_KW = "false"

    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    OPEN_BRACE = "{"
    CLOSE_BRACE = "}"
    OPEN_BRACKET = "["
    CLOSE_BRACKET = "]"
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    PERIOD = "."
    ARROW = "->"

    EQUALS = "="
    PLUS_EQUALS = "+="
    SUB_EQUALS = "-="
    MUL_EQUAL = "*="
    DIV_EQUALS = "/="
    MOD_EQUALS = "%="

    DOUBLE_PIPE = "||"
    DOUBLE_AMP = "&&"
    DOUBLE_EQUALS = "=="
    BANG_EQUALS = "!="
    OPEN_CARET = "<"
    LESS_EQUAL = "<="
    CLOSE_CARET = ">"
    GREATER_EQUAL = ">="
    INCL_RANGE = "..="
    EXCL_RANGE = ".."

    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    BANG = "!"
    DOUBLE_PLUS = "++"
    DOUBLE_MINUS = "--"


@dataclass(frozen=True)
class Token:
    """A lexed token with its source extent and text."""

    start: SrcLocation
    end: SrcLocation
    kind: TokenKind
    lexeme: str


def kind_name(kind: TokenKind) -> str:
    """Human-readable text for a token kind, used in messages."""
    return kind.value


def span_from_token(token: Token) -> SrcSpan:
    return SrcSpan(token.start, token.end)


_INFIX = {
    TokenKind.EQUALS: (2, 1),
    TokenKind.PLUS_EQUALS: (2, 1),
    TokenKind.SUB_EQUALS: (2, 1),
    TokenKind.MUL_EQUAL: (2, 1),
    TokenKind.DIV_EQUALS: (2, 1),
    TokenKind.MOD_EQUALS: (2, 1),
    TokenKind.DOUBLE_PIPE: (3, 4),
    TokenKind.DOUBLE_AMP: (5, 6),
    TokenKind.DOUBLE_EQUALS: (7, 8),
    TokenKind.BANG_EQUALS: (7, 8),
    TokenKind.OPEN_CARET: (9, 10),
    TokenKind.LESS_EQUAL: (9, 10),
    TokenKind.CLOSE_CARET: (9, 10),
    TokenKind.GREATER_EQUAL: (9, 10),
    TokenKind.INCL_RANGE: (11, 12),
    TokenKind.EXCL_RANGE: (11, 12),
    TokenKind.PLUS: (13, 14),
    TokenKind.MINUS: (13, 14),
    TokenKind.STAR: (15, 16),
    TokenKind.SLASH: (15, 16),
    TokenKind.PERCENT: (15, 16),
    TokenKind.PERIOD: (17, 18),
}

_PREFIX = {
    TokenKind.MINUS: 17,
    TokenKind.BANG: 17,
    TokenKind.DOUBLE_PLUS: 17,
    TokenKind.DOUBLE_MINUS: 17,
}

_POSTFIX = {
    TokenKind.DOUBLE_PLUS: (19, 0),
    TokenKind.DOUBLE_MINUS: (19, 0),
    TokenKind.OPEN_PAREN: (19, 0),
    TokenKind.OPEN_BRACE: (19, 0),
}


def infix_bp(kind: TokenKind) -> tuple[int, int] | None:
    """(left, right) binding power of an infix operator, or None."""
    return _INFIX.get(kind)


def prefix_bp(kind: TokenKind) -> int | None:
    """Right binding power of a prefix operator, or None."""
    return _PREFIX.get(kind)


def postfix_bp(kind: TokenKind) -> tuple[int, int] | None:
    """(left, ignored) binding power of a postfix operator, or None."""
    return _POSTFIX.get(kind)