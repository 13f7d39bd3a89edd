"""Semantic analysis: scoping, typing and validation of declarations and statements."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from phic.checks import ExpressionChecker, SemanticError
from phic.nodes import (
    Block,
    BreakStmt,
    ContinueStmt,
    Decl,
    DeclRefExpr,
    DeclStmt,
    Expr,
    FieldDecl,
    FieldInitExpr,
    ForStmt,
    FunDecl,
    IfStmt,
    MemberAccessExpr,
    MemberFunCallExpr,
    ParamDecl,
    ReturnStmt,
    Stmt,
    StructDecl,
    StructInitExpr,
    WhileStmt,
)
from phic.symbol_table import SymbolTable
from phic.types import PrimitiveKind, Type

_NULL = Type(PrimitiveKind.NULL)
_BOOL = Type(PrimitiveKind.BOOL)
_I64 = Type(PrimitiveKind.I64)
_RANGE = Type(PrimitiveKind.RANGE)


class Sema(ExpressionChecker):
    """Checks a parsed program; problems raise :class:`SemanticError`."""

    def __init__(self, decls: Iterable[Decl], symbols: SymbolTable | None = None) -> None:
        super().__init__(symbols)
        self.decls: list[Decl] = list(decls)
        self._current_fun: FunDecl | None = None
        self._loop_depth = 0

    @contextmanager
    def _in_loop(self) -> Iterator[None]:
        self._loop_depth += 1
        try:
            yield
        finally:
            self._loop_depth -= 1

    # ------------------------------------------------------------------
    # program

    def resolve(self) -> list[Decl]:
        """Check the whole program and return its declarations.

        Struct names are declared first, then every function signature (so
        functions may call each other in any order), then bodies are checked.
        """
        with self.symbols.scope():
            for decl in self.decls:
                if isinstance(decl, StructDecl):
                    self.symbols.insert(decl)

            for decl in self.decls:
                if isinstance(decl, FunDecl):
                    self.check_fun_decl(decl)
                    self.symbols.insert(decl)

            for decl in self.decls:
                if isinstance(decl, FunDecl):
                    self._check_fun_body(decl)
                elif isinstance(decl, StructDecl):
                    self.check_struct_decl(decl)
        return self.decls

    def _check_fun_body(self, fun: FunDecl) -> None:
        self._current_fun = fun
        with self.symbols.scope():
            for param in fun.params:
                self.symbols.insert(param)
            self.check_block(fun.body, True)

    # ------------------------------------------------------------------
    # declarations

    def check_fun_decl(self, fun: FunDecl) -> None:
        """Validate a function signature, including the rules for ``main``."""
        if not self.check_type(fun.return_type):
            raise SemanticError(f"invalid type for return in function: {fun.name}")
        if fun.name == "main":
            if fun.return_type != _NULL:
                raise SemanticError("main cannot return a non-null value")
            if fun.params:
                raise SemanticError("main cannot have parameters")
        for param in fun.params:
            self.check_param_decl(param)

    def check_param_decl(self, param: ParamDecl) -> None:
        if not self.check_type(param.type):
            raise SemanticError(f"invalid type for parameter: {param.name}")
        if param.type == _NULL:
            raise SemanticError(f"param type cannot be null for: {param.name}")

    def check_struct_decl(self, struct: StructDecl) -> None:
        """Check fields and method signatures, then method bodies."""
        with self.symbols.scope():
            for field in struct.fields:
                self.check_field_decl(field, struct)
                self.symbols.insert(field)

            for method in struct.methods:
                self.check_fun_decl(method)
                self.symbols.insert(method)

            for method in struct.methods:
                self._check_fun_body(method)

    def check_field_decl(self, field: FieldDecl, parent: StructDecl) -> None:
        if not self.check_type(field.type):
            raise SemanticError(f"invalid type for field: {field.name}")
        if field.type == parent.type:
            raise SemanticError(
                "Field cannot be the same as the parent struct, considering using a ptr"
            )
        if field.init is not None:
            init_type = self.check_expr(field.init)
            if init_type != field.type:
                raise SemanticError(
                    f"field initializer type mismatch: field type {field.type}, "
                    f"initializer type {init_type}"
                )

    # ------------------------------------------------------------------
    # statements

    def check_block(self, block: Block, scope_created: bool = False) -> None:
        """Check each statement; opens a scope unless the caller already did."""
        if scope_created:
            self._check_stmts(block.stmts)
        else:
            with self.symbols.scope():
                self._check_stmts(block.stmts)

    def _check_stmts(self, stmts: Iterable[Stmt]) -> None:
        for stmt in stmts:
            self.check_stmt(stmt)

    def check_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Expr):
            self.check_expr(stmt)
        elif isinstance(stmt, ReturnStmt):
            self._check_return(stmt)
        elif isinstance(stmt, IfStmt):
            self._check_if(stmt)
        elif isinstance(stmt, WhileStmt):
            self._check_while(stmt)
        elif isinstance(stmt, ForStmt):
            self._check_for(stmt)
        elif isinstance(stmt, DeclStmt):
            self._check_decl_stmt(stmt)
        elif isinstance(stmt, (BreakStmt, ContinueStmt)):
            if self._loop_depth == 0:
                keyword = "break" if isinstance(stmt, BreakStmt) else "continue"
                raise SemanticError(f"`{keyword}` outside of a loop")
        else:
            raise SemanticError(f"unsupported statement: {type(stmt).__name__}")

    def _check_return(self, stmt: ReturnStmt) -> None:
        fun = self._current_fun
        if fun is None:
            raise SemanticError("return outside of a function")
        if stmt.expr is None:
            if fun.return_type != _NULL:
                raise SemanticError(f"function '{fun.name}' should return a value")
            return
        found = self.check_expr(stmt.expr)
        if found != fun.return_type:
            raise SemanticError(
                f"type mismatch error: {fun.name}: return stmt type {found}, "
                f"expected type {fun.return_type}"
            )

    def _check_condition(self, cond: Expr, construct: str) -> None:
        if self.check_expr(cond) != _BOOL:
            raise SemanticError(f"cond in {construct} statement must have type bool")

    def _check_if(self, stmt: IfStmt) -> None:
        self._check_condition(stmt.cond, "if")
        self.check_block(stmt.then_block)
        if stmt.else_block is not None:
            self.check_block(stmt.else_block)

    def _check_while(self, stmt: WhileStmt) -> None:
        with self._in_loop():
            self._check_condition(stmt.cond, "while")
            self.check_block(stmt.body)

    def _check_for(self, stmt: ForStmt) -> None:
        with self._in_loop():
            iterable = self.check_expr(stmt.iterable)
            if stmt.loop_var.type is None and iterable == _RANGE:
                stmt.loop_var.type = _I64
            with self.symbols.scope():
                self.symbols.insert(stmt.loop_var)
                self.check_block(stmt.body, True)

    def _check_decl_stmt(self, stmt: DeclStmt) -> None:
        var = stmt.decl
        if var.type is not None and not self.check_type(var.type):
            raise SemanticError("invalid type for variable")

        if var.init is not None:
            init_type = self.check_expr(var.init)
            if var.type is None:
                var.type = init_type
            elif init_type != var.type:
                raise SemanticError(
                    f"variable initializer type mismatch: variable type {var.type}, "
                    f"initializer type {init_type}"
                )
        elif var.is_const:
            raise SemanticError(f"constant variable '{var.name}' must have an initializer")
        elif var.type is None:
            raise SemanticError(f"variable '{var.name}' has unresolved type")

        self.symbols.insert(var)

    # ------------------------------------------------------------------
    # struct-related expressions

    def check_expr(self, expr: Expr) -> Type:
        """Check ``expr`` (including struct expressions) and return its type."""
        return super().check_expr(expr)

    def _check_other(self, expr: Expr) -> Type:
        if isinstance(expr, StructInitExpr):
            return self._check_struct_init(expr)
        if isinstance(expr, FieldInitExpr):
            return self._check_field_init(expr)
        if isinstance(expr, MemberAccessExpr):
            return self._check_member_access(expr)
        if isinstance(expr, MemberFunCallExpr):
            return self._check_member_call(expr)
        return super()._check_other(expr)

    def _check_struct_init(self, expr: StructInitExpr) -> Type:
        struct = self.symbols.lookup_struct(expr.struct_name)
        if struct is None:
            raise SemanticError(f"Could not find struct {expr.struct_name}")
        expr.struct_decl = struct

        required = {field.name for field in struct.fields if field.init is None}
        for field_init in expr.fields:
            decl = struct.field(field_init.field_name)
            if decl is None:
                raise SemanticError(
                    f"Could not find field {field_init.field_name} "
                    f"in struct {expr.struct_name}"
                )
            field_init.decl = decl
            self.check_expr(field_init)
            required.discard(field_init.field_name)

        if required:
            raise SemanticError(
                f"No matching constructor for struct {expr.struct_name} found"
            )
        return struct.type

    def _check_field_init(self, expr: FieldInitExpr) -> Type:
        if expr.value is None:
            raise SemanticError(f"missing value for field {expr.field_name}")
        if expr.decl is None:
            raise SemanticError(f"field {expr.field_name} is not bound to a struct")
        if self.check_expr(expr.value) != expr.decl.type:
            raise SemanticError(f"Type mismatch for field {expr.decl.name}")
        return expr.decl.type  # type: ignore[return-value]

    def _struct_of(self, base: Expr, action: str) -> StructDecl:
        base_type = self.check_expr(base)
        if base_type.is_primitive():
            raise SemanticError(f"Cannot {action} of primitive type")
        struct = self.symbols.lookup_struct(base_type.name)
        if struct is None:
            raise SemanticError(f"Could not find struct {base_type.name} in symbol table")
        return struct

    def _check_member_access(self, expr: MemberAccessExpr) -> Type:
        struct = self._struct_of(expr.base, "access member")
        field = struct.field(expr.member)
        if field is None:
            raise SemanticError(
                f"Could not find field {expr.member} in struct {struct.name}"
            )
        if field.is_private:
            raise SemanticError(
                f"Cannot access private field {expr.member} in struct {struct.name}"
            )
        return field.type  # type: ignore[return-value]

    def _check_member_call(self, expr: MemberFunCallExpr) -> Type:
        struct = self._struct_of(expr.base, "call method")
        callee = expr.call.callee
        if not isinstance(callee, DeclRefExpr):
            raise SemanticError("unsupported method call syntax (expected identifier)")

        method = struct.method(callee.name)
        if method is None:
            raise SemanticError(
                f"Could not find method {callee.name} in struct {struct.name}"
            )
        if method.is_private:
            raise SemanticError(f"method {method.name} is private")
        if len(expr.call.args) != len(method.params):
            raise SemanticError("parameter list length mismatch")
        for arg, param in zip(expr.call.args, method.params):
            if self.check_expr(arg) != param.type:
                raise SemanticError("argument type mismatch")

        expr.call.decl = method
        expr.call.type = method.return_type
        return method.return_type