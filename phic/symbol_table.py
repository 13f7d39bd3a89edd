"""Lexically scoped tables of variables, functions and structs."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TypeVar

from phic.nodes import Decl, FunDecl, StructDecl, ValueDecl

_D = TypeVar("_D", bound=Decl)


@dataclass
class _Scope:
    vars: dict[str, ValueDecl] = field(default_factory=dict)
    funs: dict[str, FunDecl] = field(default_factory=dict)
    structs: dict[str, StructDecl] = field(default_factory=dict)


class SymbolTable:
    """A stack of scopes; lookups search from the innermost outward."""

    def __init__(self) -> None:
        self._scopes: list[_Scope] = []

    @property
    def depth(self) -> int:
        """Number of open scopes."""
        return len(self._scopes)

    def enter_scope(self) -> None:
        self._scopes.append(_Scope())

    def exit_scope(self) -> None:
        """Discard the innermost scope and everything declared in it."""
        if not self._scopes:
            raise RuntimeError("no scope to exit")
        self._scopes.pop()

    @contextmanager
    def scope(self) -> Iterator[SymbolTable]:
        """Open a scope for the duration of a ``with`` block."""
        self.enter_scope()
        try:
            yield self
        finally:
            self.exit_scope()

    def insert(self, decl: Decl) -> None:
        """Declare ``decl`` in the innermost scope, replacing any same name."""
        if not self._scopes:
            raise RuntimeError("no open scope to insert into")
        current = self._scopes[-1]
        if isinstance(decl, FunDecl):
            current.funs[decl.name] = decl
        elif isinstance(decl, StructDecl):
            current.structs[decl.name] = decl
        elif isinstance(decl, ValueDecl):
            current.vars[decl.name] = decl
        else:
            raise TypeError(f"cannot declare {type(decl).__name__}")

    def _lookup(self, tables: str, name: str) -> Decl | None:
        for scope in reversed(self._scopes):
            found = getattr(scope, tables).get(name)
            if found is not None:
                return found
        return None

    def lookup_var(self, name: str) -> ValueDecl | None:
        return self._lookup("vars", name)  # type: ignore[return-value]

    def lookup_fun(self, name: str) -> FunDecl | None:
        return self._lookup("funs", name)  # type: ignore[return-value]

    def lookup_struct(self, name: str) -> StructDecl | None:
        return self._lookup("structs", name)  # type: ignore[return-value]