"""A cursor over a token list with error reporting, recovery and type parsing."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

from phic.diagnostic import Diagnostic
from phic.diagnostic_builder import DiagnosticBuilder, Sink, error
from phic.source import SrcLocation
from phic.tokens import Token, TokenKind, kind_name, span_from_token
from phic.types import PrimitiveKind, Type

_T = TypeVar("_T")

_EOF_LOCATION = SrcLocation("", -1, -1)
_EOF_TOKEN = Token(_EOF_LOCATION, _EOF_LOCATION, TokenKind.EOF, "")

_TOP_LEVEL_STARTERS = frozenset(
    {TokenKind.FUN_KW, TokenKind.STRUCT_KW, TokenKind.ENUM_KW}
)
_STATEMENT_STARTERS = frozenset(
    {
        TokenKind.CLOSE_BRACE,
        TokenKind.RETURN_KW,
        TokenKind.IF_KW,
        TokenKind.WHILE_KW,
        TokenKind.FOR_KW,
        TokenKind.VAR_KW,
    }
)

# "range" is not spellable in source; it is only produced by analysis.
_PRIMITIVE_NAMES = {
    kind.value: kind for kind in PrimitiveKind if kind is not PrimitiveKind.RANGE
}


class TokenStream:
    """Walks a token list; reported diagnostics collect in ``diagnostics``."""

    def __init__(self, tokens: Iterable[Token], sink: Sink | None = None) -> None:
        self._tokens: list[Token] = list(tokens)
        self._pos = 0
        self._sink = sink
        self.diagnostics: list[Diagnostic] = []

    # ------------------------------------------------------------------
    # reporting

    def _record(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        if self._sink is None:
            return
        emitter = getattr(self._sink, "emit", None)
        if emitter is not None:
            emitter(diagnostic)
        else:
            self._sink(diagnostic)

    def _report(self, builder: DiagnosticBuilder) -> None:
        builder.emit(self._record)

    # ------------------------------------------------------------------
    # navigation

    def at_eof(self) -> bool:
        return self._pos >= len(self._tokens) or self.peek().kind is TokenKind.EOF

    def peek(self, offset: int = 0) -> Token:
        """The token ``offset`` places ahead, or a synthetic end-of-file token."""
        index = self._pos + offset
        if index >= len(self._tokens):
            return _EOF_TOKEN
        return self._tokens[index]

    def advance(self) -> Token:
        """Consume the current token and return it."""
        token = self.peek()
        if self._pos < len(self._tokens):
            self._pos += 1
        return token

    def expect(self, kind: TokenKind, context: str = "") -> bool:
        """Consume a token of ``kind``, or report what was found instead."""
        if self.peek().kind is kind:
            self.advance()
            return True
        suffix = f" in {context}" if context else ""
        self.emit_expected_found(kind_name(kind) + suffix, self.peek())
        return False

    def match(self, kind: TokenKind) -> bool:
        """Consume the current token if it is of ``kind``."""
        if self.peek().kind is kind:
            self.advance()
            return True
        return False

    # ------------------------------------------------------------------
    # common errors

    def emit_expected_found(self, expected: str, found: Token) -> None:
        self._report(
            error(f"expected {expected}, found `{found.lexeme}`").with_primary_label(
                span_from_token(found), f"expected {expected} here"
            )
        )

    def emit_unexpected_token(
        self, token: Token, expected: Sequence[str] = ()
    ) -> None:
        builder = error(f"unexpected token `{token.lexeme}`").with_primary_label(
            span_from_token(token), "unexpected token"
        )
        if expected:
            quoted = [f"`{name}`" for name in expected]
            listed = quoted[0]
            if len(quoted) > 1:
                listed = ", ".join(quoted[:-1]) + " or " + quoted[-1]
            builder.with_help("expected " + listed)
        self._report(builder)

    def emit_unclosed_delimiter(self, opening: Token, expected_closing: str) -> None:
        self._report(
            error("unclosed delimiter")
            .with_primary_label(span_from_token(opening), f"unclosed `{opening.lexeme}`")
            .with_help(f"expected `{expected_closing}` to close this delimiter")
            .with_note("delimiters must be properly matched")
        )

    # ------------------------------------------------------------------
    # recovery

    def sync_to_top_level(self) -> bool:
        """Skip to the next top-level declaration keyword."""
        return self.sync_to_any(_TOP_LEVEL_STARTERS)

    def sync_to_statement(self) -> bool:
        """Skip to the next token that can begin or close a statement."""
        return self.sync_to_any(_STATEMENT_STARTERS)

    def sync_to_any(self, targets: Iterable[TokenKind]) -> bool:
        """Skip the current token, then stop before any of ``targets``.

        Returns False if the end of input was reached first.
        """
        wanted = frozenset(targets)
        self.advance()
        while not self.at_eof():
            if self.peek().kind in wanted:
                return True
            self.advance()
        return False

    def sync_to(self, target: TokenKind) -> bool:
        """Stop at the next ``target`` token (not skipping the current one)."""
        while not self.at_eof() and self.peek().kind is not target:
            self.advance()
        return not self.at_eof()

    # ------------------------------------------------------------------
    # shared grammar pieces

    def parse_list(
        self,
        opening: TokenKind,
        closing: TokenKind,
        parse_item: Callable[[], _T | None],
        context: str = "list",
    ) -> list[_T] | None:
        """Parse a delimited, comma-separated list; None if it is malformed."""
        opening_token = self.peek()
        if opening_token.kind is not opening:
            self.emit_expected_found(kind_name(opening), opening_token)
            return None
        self.advance()

        items: list[_T] = []
        while not self.at_eof() and self.peek().kind is not closing:
            item = parse_item()
            if item is not None:
                items.append(item)
            else:
                self.sync_to_any((closing, TokenKind.COMMA))

            if self.peek().kind is closing:
                break
            if self.peek().kind is TokenKind.COMMA:
                self.advance()
            else:
                self._report(
                    error(f"missing comma in {context}")
                    .with_primary_label(span_from_token(self.peek()), "expected `,` here")
                    .with_help(f"separate {context} elements with commas")
                )
                return None

        if self.at_eof() or self.peek().kind is not closing:
            self.emit_unclosed_delimiter(opening_token, kind_name(closing))
            return None

        self.advance()
        return items

    def parse_type(self) -> Type | None:
        """Parse a primitive type name or a custom type identifier."""
        token = self.peek()
        primitive = _PRIMITIVE_NAMES.get(token.lexeme)
        if primitive is None and token.kind is not TokenKind.IDENTIFIER:
            self._report(
                error(f"invalid token found: {token.lexeme}")
                .with_primary_label(span_from_token(token), "expected a valid type here")
                .with_help(
                    "valid types include: int, float, bool, string, or custom type names"
                )
                .with_note("types must be either primitive types or valid identifiers")
                .with_code("E0030")
            )
            return None
        self.advance()
        return Type(primitive) if primitive is not None else Type(token.lexeme)