"""Fluent construction of diagnostics, plus helpers for common errors."""

from __future__ import annotations

import copy
from typing import Callable, Protocol, Union

from phic.diagnostic import Diagnostic, DiagnosticLevel, DiagnosticStyle
from phic.source import SrcLocation, SrcSpan


class DiagnosticSink(Protocol):
    """Anything that accepts finished diagnostics."""

    def emit(self, diagnostic: Diagnostic) -> None: ...


Sink = Union[DiagnosticSink, Callable[[Diagnostic], object]]


def _point(path: str, line: int, col: int) -> SrcSpan:
    location = SrcLocation(path, line, col)
    return SrcSpan(location, location)


class DiagnosticBuilder:
    """Chainable builder; every ``with_*`` method returns the builder."""

    def __init__(self, level: DiagnosticLevel, message: str) -> None:
        self._diagnostic = Diagnostic(level, message)

    def with_primary_label(self, span: SrcSpan, message: str = "") -> DiagnosticBuilder:
        self._diagnostic.with_primary_label(span, message)
        return self

    def with_primary_at(
        self, path: str, line: int, col: int, message: str = ""
    ) -> DiagnosticBuilder:
        """Primary label at a single position."""
        return self.with_primary_label(_point(path, line, col), message)

    def with_primary_span(
        self,
        path: str,
        start_line: int,
        start_col: int,
        end_line: int,
        end_col: int,
        message: str = "",
    ) -> DiagnosticBuilder:
        """Primary label over an explicit range."""
        span = SrcSpan(
            SrcLocation(path, start_line, start_col),
            SrcLocation(path, end_line, end_col),
        )
        return self.with_primary_label(span, message)

    def with_secondary_label(
        self, span: SrcSpan, message: str, style: DiagnosticStyle | None = None
    ) -> DiagnosticBuilder:
        self._diagnostic.with_secondary_label(span, message, style)
        return self

    def with_secondary_at(
        self,
        path: str,
        line: int,
        col: int,
        message: str,
        style: DiagnosticStyle | None = None,
    ) -> DiagnosticBuilder:
        """Secondary label at a single position."""
        return self.with_secondary_label(_point(path, line, col), message, style)

    def with_note(self, note: str) -> DiagnosticBuilder:
        self._diagnostic.with_note(note)
        return self

    def with_help(self, help_message: str) -> DiagnosticBuilder:
        self._diagnostic.with_help(help_message)
        return self

    def with_suggestion(
        self, span: SrcSpan, replacement: str, description: str
    ) -> DiagnosticBuilder:
        self._diagnostic.with_suggestion(span, replacement, description)
        return self

    def with_code(self, code: str) -> DiagnosticBuilder:
        self._diagnostic.with_code(code)
        return self

    def build(self) -> Diagnostic:
        """Return a copy of the diagnostic built so far."""
        return copy.deepcopy(self._diagnostic)

    def emit(self, sink: Sink) -> None:
        """Hand the finished diagnostic to ``sink`` (an emitter or a callable)."""
        diagnostic = self.build()
        emitter = getattr(sink, "emit", None)
        if emitter is not None:
            emitter(diagnostic)
        else:
            sink(diagnostic)


def error(message: str) -> DiagnosticBuilder:
    return DiagnosticBuilder(DiagnosticLevel.ERROR, message)


def warning(message: str) -> DiagnosticBuilder:
    return DiagnosticBuilder(DiagnosticLevel.WARNING, message)


def note(message: str) -> DiagnosticBuilder:
    return DiagnosticBuilder(DiagnosticLevel.NOTE, message)


def hint(message: str) -> DiagnosticBuilder:
    """A help-level diagnostic."""
    return DiagnosticBuilder(DiagnosticLevel.HELP, message)


def expected_found_error(
    expected: str, found: str, path: str, line: int, col: int
) -> DiagnosticBuilder:
    return error(f"expected {expected}, found {found}").with_primary_at(
        path, line, col, f"expected {expected} here"
    )


def unexpected_token_error(
    token_name: str, path: str, line: int, col: int
) -> DiagnosticBuilder:
    return error(f"unexpected token `{token_name}`").with_primary_at(
        path, line, col, "unexpected token"
    )


def missing_token_error(
    expected_token: str, path: str, line: int, col: int
) -> DiagnosticBuilder:
    return error(f"missing `{expected_token}`").with_primary_at(
        path, line, col, f"expected `{expected_token}` here"
    )


def undeclared_identifier_error(
    identifier: str, path: str, line: int, col: int
) -> DiagnosticBuilder:
    return (
        error(f"cannot find `{identifier}` in this scope")
        .with_primary_at(path, line, col, "not found in this scope")
        .with_help("consider declaring the variable before using it")
    )


def type_mismatch_error(
    expected_type: str, found_type: str, path: str, line: int, col: int
) -> DiagnosticBuilder:
    return (
        error("mismatched types")
        .with_primary_at(
            path, line, col, f"expected `{expected_type}`, found `{found_type}`"
        )
        .with_note(f"expected type `{expected_type}`")
        .with_note(f"found type `{found_type}`")
    )