"""Compiler diagnostics: severity, styling, labels, suggestions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from phic.source import SrcSpan


class DiagnosticLevel(Enum):
    """Severity of a diagnostic."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    HELP = "help"


class Color(Enum):
    """Terminal text colours used by diagnostics."""

    RED = auto()
    YELLOW = auto()
    BLUE = auto()
    GREEN = auto()
    CYAN = auto()
    MAGENTA = auto()
    WHITE = auto()
    DEFAULT = auto()


@dataclass(frozen=True)
class DiagnosticStyle:
    """Visual attributes for a piece of diagnostic text."""

    color: Color = Color.DEFAULT
    bold: bool = False
    underline: bool = False


@dataclass(frozen=True)
class DiagnosticLabel:
    """A message attached to a region of source code."""

    span: SrcSpan
    message: str
    style: DiagnosticStyle = field(default_factory=DiagnosticStyle)
    is_primary: bool = False


@dataclass(frozen=True)
class DiagnosticSuggestion:
    """A proposed replacement of a source region."""

    span: SrcSpan
    replacement_text: str
    description: str


_LEVEL_COLORS = {
    DiagnosticLevel.ERROR: Color.RED,
    DiagnosticLevel.WARNING: Color.YELLOW,
    DiagnosticLevel.NOTE: Color.BLUE,
    DiagnosticLevel.HELP: Color.GREEN,
}

_SECONDARY_STYLE = DiagnosticStyle(Color.CYAN)


def style_for_level(level: DiagnosticLevel) -> DiagnosticStyle:
    """Default bold style for the given severity."""
    return DiagnosticStyle(_LEVEL_COLORS[level], bold=True)


@dataclass
class Diagnostic:
    """A complete diagnostic; the ``with_*`` methods return self for chaining."""

    level: DiagnosticLevel
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    help_messages: list[str] = field(default_factory=list)
    suggestions: list[DiagnosticSuggestion] = field(default_factory=list)
    code: str | None = None

    def with_primary_label(self, span: SrcSpan, message: str) -> Diagnostic:
        self.labels.append(
            DiagnosticLabel(span, message, style_for_level(self.level), True)
        )
        return self

    def with_secondary_label(
        self, span: SrcSpan, message: str, style: DiagnosticStyle | None = None
    ) -> Diagnostic:
        if style is None or style.color is Color.DEFAULT:
            style = _SECONDARY_STYLE
        self.labels.append(DiagnosticLabel(span, message, style, False))
        return self

    def with_note(self, note: str) -> Diagnostic:
        self.notes.append(note)
        return self

    def with_help(self, help_message: str) -> Diagnostic:
        self.help_messages.append(help_message)
        return self

    def with_suggestion(
        self, span: SrcSpan, replacement: str, description: str
    ) -> Diagnostic:
        self.suggestions.append(DiagnosticSuggestion(span, replacement, description))
        return self

    def with_code(self, code: str) -> Diagnostic:
        self.code = code
        return self

    def has_primary_labels(self) -> bool:
        return any(label.is_primary for label in self.labels)

    def primary_span(self) -> SrcSpan | None:
        """The first primary label's span, else the first label's, else None."""
        for label in self.labels:
            if label.is_primary:
                return label.span
        return self.labels[0].span if self.labels else None