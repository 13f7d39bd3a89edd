"""Pratt parsing of expressions."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from phic.diagnostic_builder import Sink, error
from phic.nodes import (
    BinaryOp,
    BoolLiteral,
    CharLiteral,
    DeclRefExpr,
    Expr,
    FieldInitExpr,
    FloatLiteral,
    FunCallExpr,
    IntLiteral,
    MemberAccessExpr,
    MemberFunCallExpr,
    RangeLiteral,
    StrLiteral,
    StructInitExpr,
    UnaryOp,
)
from phic.stream import TokenStream
from phic.tokens import Token, TokenKind, infix_bp, postfix_bp, prefix_bp, span_from_token

_BASE_TERMINATORS = (
    TokenKind.EOF,
    TokenKind.SEMICOLON,
    TokenKind.COMMA,
    TokenKind.CLOSE_PAREN,
    TokenKind.CLOSE_BRACKET,
)

_PREFIX_OPERATORS = frozenset(
    {TokenKind.MINUS, TokenKind.BANG, TokenKind.DOUBLE_PLUS, TokenKind.DOUBLE_MINUS}
)


def _terminators(with_brace: bool) -> tuple[TokenKind, ...]:
    if with_brace:
        return _BASE_TERMINATORS + (TokenKind.OPEN_BRACE,)
    return _BASE_TERMINATORS


class ExpressionParser(TokenStream):
    """Parses expressions; ``no_struct_init`` stops ``{`` starting a struct literal."""

    def __init__(self, tokens: Iterable[Token], sink: Sink | None = None) -> None:
        super().__init__(tokens, sink)
        self.no_struct_init = False

    def parse_expr(self) -> Expr | None:
        """Parse a full expression."""
        return self.pratt(0, _terminators(self.no_struct_init))

    def pratt(self, min_bp: int, terminators: Sequence[TokenKind]) -> Expr | None:
        lhs = self.parse_nud(self.advance())
        if lhs is None:
            return None

        while True:
            op = self.peek()
            if op.kind in terminators:
                break

            post = postfix_bp(op.kind)
            if post is not None:
                left, _ = post
                if left < min_bp:
                    break
                # A brace that may not open a struct literal is left for the caller.
                if op.kind is TokenKind.OPEN_BRACE and self.no_struct_init:
                    break
                lhs = self.parse_postfix(op, lhs)
                if lhs is None:
                    return None
                continue

            infix = infix_bp(op.kind)
            if infix is not None:
                left, right = infix
                if left < min_bp:
                    break
                lhs = self.parse_infix(op, lhs, right)
                if lhs is None:
                    return None
                continue

            break

        return lhs

    def parse_nud(self, token: Token) -> Expr | None:
        """Parse what may begin an expression, given its first token."""
        if token.kind in _PREFIX_OPERATORS:
            return self.parse_prefix_unary(token)
        if token.kind is TokenKind.IDENTIFIER:
            return DeclRefExpr(token.start, token.lexeme)
        if token.kind is TokenKind.OPEN_PAREN:
            return self.parse_grouping()
        return self.parse_literal(token)

    def parse_grouping(self) -> Expr | None:
        """Parse the inside of ``( expr )``; the ``(`` is already consumed."""
        inner = self.pratt(0, _terminators(not self.no_struct_init))
        if inner is None:
            return None
        if self.peek().kind is not TokenKind.CLOSE_PAREN:
            self._report(
                error("missing closing parenthesis")
                .with_primary_label(span_from_token(self.peek()), "expected `)` here")
                .with_help("parentheses must be properly matched")
            )
            return None
        self.advance()
        return inner

    def parse_prefix_unary(self, token: Token) -> Expr | None:
        right = prefix_bp(token.kind)
        if right is None:
            raise ValueError(f"{token.kind.value!r} is not a prefix operator")
        operand = self.pratt(right, _terminators(not self.no_struct_init))
        if operand is None:
            return None
        return UnaryOp(token.start, operand, token.kind, True)

    def parse_literal(self, token: Token) -> Expr | None:
        """Build a literal from ``token``, or None if it is not one."""
        kind = token.kind
        if kind is TokenKind.INT_LITERAL:
            return IntLiteral(token.start, int(token.lexeme))
        if kind is TokenKind.FLOAT_LITERAL:
            return FloatLiteral(token.start, float(token.lexeme))
        if kind is TokenKind.STR_LITERAL:
            return StrLiteral(token.start, token.lexeme)
        if kind is TokenKind.CHAR_LITERAL:
            return CharLiteral(token.start, token.lexeme[0])
        if kind is TokenKind.TRUE_KW:
            return BoolLiteral(token.start, True)
        if kind is TokenKind.FALSE_KW:
            return BoolLiteral(token.start, False)
        return None

    def parse_postfix(self, op: Token, lhs: Expr) -> Expr | None:
        if op.kind in (TokenKind.DOUBLE_PLUS, TokenKind.DOUBLE_MINUS):
            self.advance()
            return UnaryOp(op.start, lhs, op.kind, False)
        if op.kind is TokenKind.OPEN_PAREN:
            return self.parse_fun_call(lhs)
        if op.kind is TokenKind.OPEN_BRACE and not self.no_struct_init:
            return self.parse_struct_init(lhs)
        return lhs

    def parse_infix(self, op: Token, lhs: Expr, right_bp: int) -> Expr | None:
        terminators = _terminators(self.no_struct_init)
        self.advance()

        rhs = self.pratt(right_bp, terminators)
        if rhs is None:
            return None

        if op.kind in (TokenKind.EXCL_RANGE, TokenKind.INCL_RANGE):
            return RangeLiteral(
                op.start, lhs, rhs, op.kind is TokenKind.INCL_RANGE
            )

        if op.kind is TokenKind.PERIOD:
            if isinstance(rhs, DeclRefExpr):
                return MemberAccessExpr(rhs.location, lhs, rhs.name)
            if isinstance(rhs, FunCallExpr):
                return MemberFunCallExpr(rhs.location, lhs, rhs)

        return BinaryOp(op.start, lhs, rhs, op.kind)

    def parse_fun_call(self, callee: Expr) -> FunCallExpr | None:
        args = self.parse_list(
            TokenKind.OPEN_PAREN, TokenKind.CLOSE_PAREN, self.parse_expr
        )
        if args is None:
            return None
        return FunCallExpr(callee.location, callee, args)

    def parse_struct_init(self, init_expr: Expr) -> StructInitExpr | None:
        if not isinstance(init_expr, DeclRefExpr):
            self._report(
                error("expected a struct name before `{`").with_primary_label(
                    span_from_token(self.peek()), "struct initializer here"
                )
            )
            return None
        fields = self.parse_list(
            TokenKind.OPEN_BRACE, TokenKind.CLOSE_BRACE, self.parse_field_init
        )
        if fields is None:
            return None
        return StructInitExpr(init_expr.location, init_expr.name, fields)

    def parse_field_init(self) -> FieldInitExpr | None:
        """Parse ``name = value`` inside a struct initializer."""
        if self.peek().kind is not TokenKind.IDENTIFIER:
            self.emit_unexpected_token(self.peek(), ["Identifier"])
            return None
        location = self.peek().start
        name = self.advance().lexeme

        if self.peek().kind is not TokenKind.EQUALS:
            self.emit_unexpected_token(self.peek(), ["="])
            return None
        self.advance()

        return FieldInitExpr(location, name, self.parse_expr())