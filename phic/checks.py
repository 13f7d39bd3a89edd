"""Type checking of expressions and validation of type names."""

from __future__ import annotations

from phic.nodes import (
    BinaryOp,
    BoolLiteral,
    CharLiteral,
    DeclRefExpr,
    Expr,
    FloatLiteral,
    FunCallExpr,
    IntLiteral,
    MemberAccessExpr,
    RangeLiteral,
    StrLiteral,
    UnaryOp,
)
from phic.symbol_table import SymbolTable
from phic.tokens import TokenKind
from phic.types import PrimitiveKind, Type

_ARITHMETIC = frozenset(
    {TokenKind.PLUS, TokenKind.MINUS, TokenKind.STAR, TokenKind.SLASH, TokenKind.PERCENT}
)
_EQUALITY = frozenset({TokenKind.DOUBLE_EQUALS, TokenKind.BANG_EQUALS})
_ORDERING = frozenset(
    {
        TokenKind.OPEN_CARET,
        TokenKind.LESS_EQUAL,
        TokenKind.CLOSE_CARET,
        TokenKind.GREATER_EQUAL,
    }
)
_LOGICAL = frozenset({TokenKind.DOUBLE_AMP, TokenKind.DOUBLE_PIPE})

_BOOL = Type(PrimitiveKind.BOOL)
_I64 = Type(PrimitiveKind.I64)

_LITERAL_TYPES = {
    IntLiteral: _I64,
    FloatLiteral: Type(PrimitiveKind.F64),
    StrLiteral: Type(PrimitiveKind.STRING),
    CharLiteral: Type(PrimitiveKind.CHAR),
    BoolLiteral: _BOOL,
}


class SemanticError(Exception):
    """Raised when a program breaks a typing or scoping rule."""


def promote_numeric(lhs: Type, rhs: Type) -> Type:
    """Result type of arithmetic: a float side wins over an integer side."""
    if lhs == rhs:
        return lhs
    if lhs.is_integer() and rhs.is_float():
        return rhs
    return lhs


class ExpressionChecker:
    """Resolves names in expressions and assigns each expression its type."""

    def __init__(self, symbols: SymbolTable | None = None) -> None:
        self.symbols = symbols if symbols is not None else SymbolTable()

    def check_type(self, ty: Type | None) -> bool:
        """Whether ``ty`` is primitive or names a declared struct."""
        if ty is None:
            return False
        if ty.is_primitive():
            return True
        return self.symbols.lookup_struct(ty.name) is not None

    def check_expr(self, expr: Expr) -> Type:
        """Check ``expr``, store its type on it and return that type."""
        literal = _LITERAL_TYPES.get(type(expr))
        if literal is not None:
            result = literal
        elif isinstance(expr, DeclRefExpr):
            result = self._check_decl_ref(expr)
        elif isinstance(expr, FunCallExpr):
            result = self._check_call(expr)
        elif isinstance(expr, RangeLiteral):
            result = self._check_range(expr)
        elif isinstance(expr, BinaryOp):
            result = self._check_binary(expr)
        elif isinstance(expr, UnaryOp):
            result = self._check_unary(expr)
        else:
            result = self._check_other(expr)
        expr.type = result
        return result

    def _check_other(self, expr: Expr) -> Type:
        raise SemanticError(f"unsupported expression: {type(expr).__name__}")

    def _check_decl_ref(self, expr: DeclRefExpr) -> Type:
        decl = self.symbols.lookup_var(expr.name)
        if decl is None:
            raise SemanticError(f"undeclared identifier '{expr.name}'")
        expr.decl = decl
        if decl.type is None:
            raise SemanticError(f"variable '{expr.name}' has unresolved type")
        return decl.type

    def _check_call(self, expr: FunCallExpr) -> Type:
        if not isinstance(expr.callee, DeclRefExpr):
            raise SemanticError("callee must be a function name")
        fun = self.symbols.lookup_fun(expr.callee.name)
        if fun is None:
            raise SemanticError(f"undeclared function '{expr.callee.name}'")
        if len(expr.args) != len(fun.params):
            raise SemanticError("parameter list length mismatch")
        for arg, param in zip(expr.args, fun.params):
            if self.check_expr(arg) != param.type:
                raise SemanticError("argument type mismatch")
        expr.decl = fun
        return fun.return_type

    def _check_range(self, expr: RangeLiteral) -> Type:
        start = self.check_expr(expr.start)
        end = self.check_expr(expr.end)
        if not start.is_integer():
            raise SemanticError(
                "Range start must be an integer type "
                "(i8, i16, i32, i64, u8, u16, u32, u64)"
            )
        if not end.is_integer():
            raise SemanticError(
                "Range end must be an integer type "
                "(i8, i16, i32, i64, u8, u16, u32, u64)"
            )
        expr.start.type = _I64
        expr.end.type = _I64
        return Type(PrimitiveKind.RANGE)

    def _check_binary(self, expr: BinaryOp) -> Type:
        lhs = self.check_expr(expr.lhs)
        rhs = self.check_expr(expr.rhs)
        op = expr.op

        if not lhs.is_primitive() or not rhs.is_primitive():
            raise SemanticError("Binary operations not supported on custom types")

        if op in _ARITHMETIC:
            if not lhs.is_numeric() or not rhs.is_numeric():
                raise SemanticError("Arithmetic operations require numeric types")
            if op is TokenKind.PERCENT and not (lhs.is_integer() and rhs.is_integer()):
                raise SemanticError("Modulo operation requires integer types")
            return promote_numeric(lhs, rhs)

        if op is TokenKind.EQUALS:
            self._check_assignment(expr, lhs, rhs)
            return lhs

        if op in _EQUALITY:
            if lhs != rhs:
                raise SemanticError("Equality comparison requires same types")
            return _BOOL

        if op in _ORDERING:
            if not lhs.is_numeric() or not rhs.is_numeric() or lhs != rhs:
                raise SemanticError("Ordering comparisons require same numeric types")
            return _BOOL

        if op in _LOGICAL:
            if lhs != _BOOL or rhs != _BOOL:
                raise SemanticError("Logical operations require boolean types")
            return _BOOL

        raise SemanticError("Unsupported binary operation")

    def _check_assignment(self, expr: BinaryOp, lhs: Type, rhs: Type) -> None:
        target = expr.lhs
        if not target.is_assignable():
            raise SemanticError("Left-hand side of assignment must be assignable")
        if lhs != rhs:
            raise SemanticError("Assignment requires same types")

        base = target
        while isinstance(base, MemberAccessExpr):
            base = base.base
        if isinstance(base, DeclRefExpr) and base.decl is not None:
            if getattr(base.decl, "is_const", False):
                raise SemanticError("attempt to reassign value of constant variable")

    def _check_unary(self, expr: UnaryOp) -> Type:
        operand = self.check_expr(expr.operand)
        if not operand.is_primitive():
            raise SemanticError("Unary operations not supported on custom types")

        op = expr.op
        if op is TokenKind.MINUS:
            if not operand.is_numeric():
                raise SemanticError("Arithmetic negation requires numeric type")
            return operand
        if op is TokenKind.BANG:
            if operand != _BOOL:
                raise SemanticError("Logical NOT requires boolean type")
            return _BOOL
        if op in (TokenKind.DOUBLE_PLUS, TokenKind.DOUBLE_MINUS):
            if not operand.is_integer():
                raise SemanticError("Increment/decrement requires integer type")
            return operand
        raise SemanticError("Unsupported unary operation")