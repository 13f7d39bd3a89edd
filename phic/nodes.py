"""Syntax tree nodes: expressions, statements and declarations."""

from __future__ import annotations

from dataclasses import dataclass, field as _field

from phic.source import SrcLocation
from phic.tokens import TokenKind
from phic.types import Type

# Nodes compare and hash by identity so they can key side tables.


@dataclass(eq=False)
class Stmt:
    """Base of all statements."""

    location: SrcLocation


@dataclass(eq=False)
class Expr(Stmt):
    """Base of all expressions; ``type`` is filled in by semantic analysis."""

    type: Type | None = _field(default=None, init=False)

    def is_assignable(self) -> bool:
        """Whether the expression may stand on the left of ``=``."""
        return False


@dataclass(eq=False)
class IntLiteral(Expr):
    value: int


@dataclass(eq=False)
class FloatLiteral(Expr):
    value: float


@dataclass(eq=False)
class StrLiteral(Expr):
    value: str


@dataclass(eq=False)
class CharLiteral(Expr):
    value: str


@dataclass(eq=False)
class BoolLiteral(Expr):
    value: bool


@dataclass(eq=False)
class RangeLiteral(Expr):
    start: Expr
    end: Expr
    inclusive: bool


@dataclass(eq=False)
class DeclRefExpr(Expr):
    name: str
    decl: ValueDecl | None = _field(default=None, init=False)

    def is_assignable(self) -> bool:
        return True


@dataclass(eq=False)
class FunCallExpr(Expr):
    callee: Expr
    args: list[Expr]
    decl: FunDecl | None = _field(default=None, init=False)


@dataclass(eq=False)
class BinaryOp(Expr):
    lhs: Expr
    rhs: Expr
    op: TokenKind


@dataclass(eq=False)
class UnaryOp(Expr):
    operand: Expr
    op: TokenKind
    is_prefix: bool


@dataclass(eq=False)
class FieldInitExpr(Expr):
    field_name: str
    value: Expr | None
    decl: FieldDecl | None = _field(default=None, init=False)


@dataclass(eq=False)
class StructInitExpr(Expr):
    struct_name: str
    fields: list[FieldInitExpr]
    struct_decl: StructDecl | None = _field(default=None, init=False)


@dataclass(eq=False)
class MemberAccessExpr(Expr):
    base: Expr
    member: str

    def is_assignable(self) -> bool:
        return True


@dataclass(eq=False)
class MemberFunCallExpr(Expr):
    base: Expr
    call: FunCallExpr


@dataclass(eq=False)
class Block:
    """A braced sequence of statements."""

    stmts: list[Stmt] = _field(default_factory=list)


@dataclass(eq=False)
class ReturnStmt(Stmt):
    expr: Expr | None = None


@dataclass(eq=False)
class IfStmt(Stmt):
    cond: Expr
    then_block: Block
    else_block: Block | None = None


@dataclass(eq=False)
class WhileStmt(Stmt):
    cond: Expr
    body: Block


@dataclass(eq=False)
class ForStmt(Stmt):
    loop_var: VarDecl
    iterable: Expr
    body: Block


@dataclass(eq=False)
class DeclStmt(Stmt):
    decl: VarDecl


@dataclass(eq=False)
class BreakStmt(Stmt):
    pass


@dataclass(eq=False)
class ContinueStmt(Stmt):
    pass


@dataclass(eq=False)
class Decl:
    """Base of all named declarations."""

    location: SrcLocation
    name: str


@dataclass(eq=False)
class ValueDecl(Decl):
    """A declaration that names a value; ``type`` may be None until inferred."""

    type: Type | None


@dataclass(eq=False)
class VarDecl(ValueDecl):
    is_const: bool = False
    init: Expr | None = None


@dataclass(eq=False)
class ParamDecl(ValueDecl):
    is_const: bool = False


@dataclass(eq=False)
class FieldDecl(ValueDecl):
    init: Expr | None = None
    is_private: bool = True

    @property
    def is_const(self) -> bool:
        return False


@dataclass(eq=False)
class FunDecl(Decl):
    return_type: Type
    params: list[ParamDecl]
    body: Block


@dataclass(eq=False)
class MethodDecl(FunDecl):
    is_private: bool = True


@dataclass(eq=False)
class StructDecl(Decl):
    fields: list[FieldDecl] = _field(default_factory=list)
    methods: list[MethodDecl] = _field(default_factory=list)

    @property
    def type(self) -> Type:
        """The named type this struct declares."""
        return Type(self.name)

    def field(self, name: str) -> FieldDecl | None:
        return next((f for f in self.fields if f.name == name), None)

    def method(self, name: str) -> MethodDecl | None:
        return next((m for m in self.methods if m.name == name), None)