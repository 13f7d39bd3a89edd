"""Top-level parsing: functions, parameters and struct declarations."""

from __future__ import annotations

from collections.abc import Iterable

from phic.diagnostic_builder import Sink, error
from phic.nodes import Decl, FieldDecl, FunDecl, MethodDecl, ParamDecl, StructDecl
from phic.source import SrcManager
from phic.statements import StatementParser
from phic.tokens import Token, TokenKind, span_from_token
from phic.types import PrimitiveKind, Type

_MEMBER_RECOVERY = (
    TokenKind.FUN_KW,
    TokenKind.VAR_KW,
    TokenKind.CONST_KW,
    TokenKind.OPEN_BRACE,
)


class Parser(StatementParser):
    """Turns a token list into top-level declarations.

    Problems are reported as diagnostics (see ``diagnostics``) and parsing
    resumes at the next declaration keyword.
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        sink: Sink | None = None,
        *,
        path: str = "",
        source: str | None = None,
        source_manager: SrcManager | None = None,
    ) -> None:
        super().__init__(tokens, sink)
        self.path = path
        if source_manager is not None and source is not None:
            source_manager.add_source_file(path, source)

    def parse(self) -> list[Decl]:
        """Parse the whole token list into function and struct declarations."""
        decls: list[Decl] = []
        while not self.at_eof():
            kind = self.peek().kind
            if kind is TokenKind.FUN_KW:
                parsed: Decl | None = self.parse_fun_decl()
            elif kind is TokenKind.STRUCT_KW:
                parsed = self.parse_struct_decl()
            else:
                self.emit_unexpected_token(self.peek(), ["fun", "struct"])
                self.sync_to_top_level()
                continue
            if parsed is not None:
                decls.append(parsed)
            else:
                self.sync_to_top_level()
        return decls

    def parse_fun_decl(self) -> FunDecl | None:
        """Parse ``fun name(params) [-> type] { body }``."""
        fun_token = self.advance()
        location = fun_token.start

        name_token = self.peek()
        if name_token.kind is not TokenKind.IDENTIFIER:
            self._report(
                error("invalid function name")
                .with_primary_label(
                    span_from_token(name_token), "expected function name here"
                )
                .with_secondary_label(span_from_token(fun_token), "after `fun` keyword")
                .with_help("function names must be valid identifiers")
                .with_note("identifiers must start with a letter or underscore")
                .with_code("E0006")
            )
            return None
        name = self.advance().lexeme

        params = self.parse_list(
            TokenKind.OPEN_PAREN, TokenKind.CLOSE_PAREN, self.parse_param_decl
        )
        if params is None:
            return None

        return_type = Type(PrimitiveKind.NULL)
        if self.peek().kind is TokenKind.ARROW:
            self.advance()
            parsed_type = self.parse_type()
            if parsed_type is None:
                return None
            return_type = parsed_type

        body = self.parse_block()
        if body is None:
            return None

        return FunDecl(location, name, return_type, params, body)

    def parse_param_decl(self) -> ParamDecl | None:
        """Parse ``const|var name: type``."""
        kind = self.peek().kind
        if kind is TokenKind.CONST_KW:
            is_const = True
        elif kind is TokenKind.VAR_KW:
            is_const = False
        else:
            self.emit_unexpected_token(self.peek(), ["const", "var"])
            return None
        self.advance()

        binding = self.parse_typed_binding()
        if binding is None:
            return None
        return ParamDecl(binding.location, binding.name, binding.type, is_const)

    def parse_struct_decl(self) -> StructDecl | None:
        """Parse ``struct Name { fields and methods }``."""
        if self.peek().kind is not TokenKind.STRUCT_KW:
            self.emit_unexpected_token(self.peek(), ["struct"])
            return None
        location = self.advance().start
        name = self.advance().lexeme

        if self.peek().kind is not TokenKind.OPEN_BRACE:
            self._report(
                error("Expected '{' after struct identifier").with_primary_label(
                    span_from_token(self.peek()), "expected `{` here"
                )
            )
        self.advance()

        fields: list[FieldDecl] = []
        methods: list[MethodDecl] = []
        while not self.at_eof() and self.peek().kind is not TokenKind.CLOSE_BRACE:
            check = self.peek()
            if check.kind is TokenKind.PUBLIC_KW:
                check = self.peek(1)

            if check.kind is TokenKind.FUN_KW:
                method = self.parse_method_decl()
                if method is not None:
                    methods.append(method)
                else:
                    self.sync_to_any(_MEMBER_RECOVERY)
            elif check.kind is TokenKind.IDENTIFIER:
                field = self.parse_field_decl()
                if field is not None:
                    fields.append(field)
                else:
                    self.sync_to_any(_MEMBER_RECOVERY)
            else:
                self.emit_unexpected_token(check, ["fun", "identifier"])
                self.sync_to_any(_MEMBER_RECOVERY + (TokenKind.CLOSE_BRACE,))

        self.advance()
        return StructDecl(location, name, fields, methods)

    def parse_field_decl(self) -> FieldDecl | None:
        """Parse ``[public] name: type [= value];``; fields are private by default."""
        is_private = True
        if self.peek().kind is TokenKind.PUBLIC_KW:
            is_private = False
            self.advance()

        binding = self.parse_typed_binding()
        if binding is None:
            return None

        if self.advance().kind is not TokenKind.EQUALS:
            return FieldDecl(binding.location, binding.name, binding.type, None, is_private)

        init = self.parse_expr()
        if init is None:
            return None

        if self.advance().kind is not TokenKind.SEMICOLON:
            self._report(
                error("missing semicolon after variable declaration")
                .with_primary_label(span_from_token(self.peek()), "expected `;` here")
                .with_help("variable declarations must end with a semicolon")
                .with_suggestion(span_from_token(self.peek()), ";", "add semicolon")
                .with_code("E0025")
            )
            return None

        return FieldDecl(binding.location, binding.name, binding.type, init, is_private)

    def parse_method_decl(self) -> MethodDecl | None:
        """Parse ``[public] fun ...`` inside a struct; methods are private by default."""
        is_private = True
        if self.peek().kind is TokenKind.PUBLIC_KW:
            is_private = False
            self.advance()

        if self.peek().kind is not TokenKind.FUN_KW:
            self.emit_unexpected_token(self.peek(), ["fun"])
            return None

        fun = self.parse_fun_decl()
        if fun is None:
            return None
        return MethodDecl(
            fun.location, fun.name, fun.return_type, fun.params, fun.body, is_private
        )