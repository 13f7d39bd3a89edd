"""Parsing of statements, blocks and typed bindings."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from phic.diagnostic_builder import error
from phic.nodes import (
    Block,
    BreakStmt,
    ContinueStmt,
    DeclStmt,
    Expr,
    ForStmt,
    IfStmt,
    ReturnStmt,
    Stmt,
    VarDecl,
    WhileStmt,
)
from phic.expressions import ExpressionParser
from phic.source import SrcLocation
from phic.tokens import TokenKind, span_from_token
from phic.types import Type


@dataclass(frozen=True)
class TypedBinding:
    """A ``name: type`` pair and where the name appears."""

    location: SrcLocation
    name: str
    type: Type


class StatementParser(ExpressionParser):
    """Adds statement and block parsing on top of expression parsing."""

    @contextmanager
    def _without_struct_literals(self) -> Iterator[None]:
        """Keep ``{`` from opening a struct literal, e.g. in a loop header."""
        previous = self.no_struct_init
        self.no_struct_init = True
        try:
            yield
        finally:
            self.no_struct_init = previous

    def _header_expr(self) -> Expr | None:
        with self._without_struct_literals():
            return self.parse_expr()

    def parse_typed_binding(self) -> TypedBinding | None:
        """Parse ``identifier ':' type``."""
        token = self.peek()
        if token.kind is not TokenKind.IDENTIFIER:
            self._report(
                error("expected identifier").with_primary_label(
                    span_from_token(token), "expected identifier here"
                )
            )
            return None
        start = token.start
        name = self.advance().lexeme

        colon = self.peek()
        if colon.kind is not TokenKind.COLON:
            self._report(
                error("expected colon")
                .with_primary_label(span_from_token(colon), "expected `:` here")
                .with_suggestion(span_from_token(colon), ":", "add colon before type")
            )
            return None
        self.advance()

        declared = self.parse_type()
        if declared is None:
            return None
        return TypedBinding(start, name, declared)

    def parse_block(self) -> Block | None:
        """Parse ``{ stmt* }``, recovering from bad statements inside."""
        if self.peek().kind is not TokenKind.OPEN_BRACE:
            self.emit_expected_found("{", self.peek())
        self.advance()

        stmts: list[Stmt] = []
        while self.peek().kind is not TokenKind.CLOSE_BRACE:
            if self.peek().kind is TokenKind.EOF:
                self.emit_unclosed_delimiter(self.peek(), "}")
                return None
            stmt = self.parse_stmt()
            if stmt is not None:
                stmts.append(stmt)
                continue
            self.sync_to_statement()

        self.advance()
        return Block(stmts)

    def parse_stmt(self) -> Stmt | None:
        """Parse one statement, dispatching on its first token."""
        kind = self.peek().kind
        if kind is TokenKind.RETURN_KW:
            return self.parse_return()
        if kind is TokenKind.IF_KW:
            return self.parse_if()
        if kind is TokenKind.WHILE_KW:
            return self.parse_while()
        if kind is TokenKind.FOR_KW:
            return self.parse_for()
        if kind in (TokenKind.VAR_KW, TokenKind.CONST_KW):
            return self.parse_decl()
        if kind is TokenKind.BREAK_KW:
            return self.parse_break()
        if kind is TokenKind.CONTINUE_KW:
            return self.parse_continue()
        expr = self.parse_expr()
        self.advance()  # the terminating semicolon
        return expr

    def parse_return(self) -> ReturnStmt | None:
        location = self.peek().start
        self.advance()

        if self.peek().kind is TokenKind.SEMICOLON:
            self.advance()
            return ReturnStmt(location, None)

        value = self.parse_expr()
        if value is None:
            return None

        token = self.peek()
        if token.kind is not TokenKind.SEMICOLON:
            self._report(
                error("missing semicolon after return statement")
                .with_primary_label(span_from_token(token), "expected `;` here")
                .with_help("return statements must end with a semicolon")
                .with_suggestion(span_from_token(token), ";", "add semicolon")
                .with_code("E0012")
            )
            return None
        self.advance()
        return ReturnStmt(location, value)

    def parse_if(self) -> IfStmt | None:
        """Parse ``if cond { ... }`` with an optional ``else`` or ``else if``."""
        location = self.peek().start
        self.advance()

        cond = self._header_expr()
        if cond is None:
            return None
        body = self.parse_block()
        if body is None:
            return None

        if self.peek().kind is not TokenKind.ELSE_KW:
            return IfStmt(location, cond, body, None)
        self.advance()

        if self.peek().kind is TokenKind.OPEN_BRACE:
            else_body = self.parse_block()
            if else_body is None:
                return None
            return IfStmt(location, cond, body, else_body)

        if self.peek().kind is TokenKind.IF_KW:
            nested = self.parse_if()
            if nested is None:
                return None
            return IfStmt(location, cond, body, Block([nested]))

        self._report(
            error("invalid else clause")
            .with_primary_label(span_from_token(self.peek()), "unexpected token here")
            .with_help("else must be followed by a block `{` or another `if` statement")
            .with_code("E0040")
        )
        return None

    def parse_while(self) -> WhileStmt | None:
        location = self.peek().start
        self.advance()

        cond = self._header_expr()
        if cond is None:
            return None
        body = self.parse_block()
        if body is None:
            return None
        return WhileStmt(location, cond, body)

    def parse_for(self) -> ForStmt | None:
        """Parse ``for name in iterable { ... }``; the variable's type is left open."""
        location = self.peek().start
        self.advance()

        loop_var = self.advance()
        if loop_var.kind is not TokenKind.IDENTIFIER:
            self._report(
                error("for loop must have a loop variable")
                .with_primary_label(span_from_token(loop_var), "expected identifier here")
                .with_help("for loops have the form: `for variable in iterable`")
                .with_note(
                    "the loop variable will be assigned each value from the iterable"
                )
                .with_code("E0014")
            )
            return None

        in_kw = self.advance()
        if in_kw.kind is not TokenKind.IN_KW:
            self._report(
                error("missing `in` keyword in for loop")
                .with_primary_label(span_from_token(loop_var), "loop variable")
                .with_secondary_label(span_from_token(in_kw), "expected `in` here")
                .with_help("for loops have the form: `for variable in iterable`")
                .with_suggestion(span_from_token(in_kw), "in", "add `in` keyword")
                .with_code("E0015")
            )
            return None

        iterable = self._header_expr()
        if iterable is None:
            return None
        body = self.parse_block()
        if body is None:
            return None

        decl = VarDecl(loop_var.start, loop_var.lexeme, None, False, None)
        return ForStmt(location, decl, iterable, body)

    def parse_decl(self) -> DeclStmt | None:
        """Parse ``var|const name [: type] = value;``."""
        location = self.peek().start
        kind = self.peek().kind
        if kind is TokenKind.CONST_KW:
            is_const = True
        elif kind is TokenKind.VAR_KW:
            is_const = False
        else:
            self.emit_unexpected_token(self.peek(), ["var", "const"])
            return None
        self.advance()

        declared: Type | None = None
        if self.peek(1).kind is not TokenKind.COLON:
            token = self.peek()
            if token.kind is not TokenKind.IDENTIFIER:
                self._report(
                    error("expected identifier").with_primary_label(
                        span_from_token(token), "expected identifier here"
                    )
                )
                return None
            var_location = token.start
            name = self.advance().lexeme
        else:
            binding = self.parse_typed_binding()
            if binding is None:
                return None
            var_location, name, declared = binding.location, binding.name, binding.type

        if self.advance().kind is not TokenKind.EQUALS:
            self._report(
                error("missing assignment in variable declaration")
                .with_primary_label(span_from_token(self.peek()), "expected `=` here")
                .with_help("variables must be initialized with a value")
                .with_note("variable syntax: `let name: type = value;`")
                .with_code("E0023")
            )
            return None

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

        return DeclStmt(
            location, VarDecl(var_location, name, declared, is_const, init)
        )

    def parse_break(self) -> BreakStmt | None:
        location = self.peek().start
        if self.advance().kind is not TokenKind.BREAK_KW:
            self._report(
                error("missing break keyword")
                .with_primary_label(span_from_token(self.peek()), "expected `break` here")
                .with_help("break statements must be preceded by a loop")
                .with_code("E0026")
            )
            return None
        if self.advance().kind is not TokenKind.SEMICOLON:
            self._report(
                error("missing semicolon after break statement")
                .with_primary_label(span_from_token(self.peek()), "expected `;` here")
                .with_help("break statements must end with a semicolon")
                .with_suggestion(span_from_token(self.peek()), ";", "add semicolon")
                .with_code("E0027")
            )
            return None
        return BreakStmt(location)

    def parse_continue(self) -> ContinueStmt | None:
        location = self.peek().start
        if self.advance().kind is not TokenKind.CONTINUE_KW:
            self._report(
                error("missing continue keyword")
                .with_primary_label(
                    span_from_token(self.peek()), "expected `continue` here"
                )
                .with_help("continue statements must be preceded by a loop")
                .with_code("E0028")
            )
            return None
        if self.advance().kind is not TokenKind.SEMICOLON:
            self._report(
                error("missing semicolon after continue statement")
                .with_primary_label(span_from_token(self.peek()), "expected `;` here")
                .with_help("continue statements must end with a semicolon")
                .with_suggestion(span_from_token(self.peek()), ";", "add semicolon")
                .with_code("E0029")
            )
            return None
        return ContinueStmt(location)