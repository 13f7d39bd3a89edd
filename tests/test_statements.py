import pytest

from phic.nodes import (
    BinaryOp,
    Block,
    BoolLiteral,
    BreakStmt,
    ContinueStmt,
    DeclRefExpr,
    DeclStmt,
    ForStmt,
    IfStmt,
    IntLiteral,
    RangeLiteral,
    ReturnStmt,
    StructInitExpr,
    WhileStmt,
)
from phic.source import SrcLocation
from phic.statements import StatementParser, TypedBinding
from phic.tokens import Token, TokenKind
from phic.types import PrimitiveKind, Type

K = TokenKind


def ident(name):
    return (K.IDENTIFIER, name)


def num(n):
    return (K.INT_LITERAL, str(n))


def make_parser(*items):
    tokens = []
    for col, item in enumerate(items, start=1):
        kind, lexeme = item if isinstance(item, tuple) else (item, item.value)
        loc = SrcLocation("t.phi", 1, col)
        tokens.append(Token(loc, loc, kind, lexeme))
    end = SrcLocation("t.phi", 1, len(items) + 1)
    tokens.append(Token(end, end, K.EOF, ""))
    return StatementParser(tokens)


def codes(parser):
    return [d.code for d in parser.diagnostics]


def test_block_with_return_value():
    p = make_parser(K.OPEN_BRACE, K.RETURN_KW, num(1), K.SEMICOLON, K.CLOSE_BRACE)
    block = p.parse_block()
    assert isinstance(block, Block)
    assert len(block.stmts) == 1
    ret = block.stmts[0]
    assert isinstance(ret, ReturnStmt)
    assert isinstance(ret.expr, IntLiteral) and ret.expr.value == 1
    assert p.at_eof()
    assert p.diagnostics == []


def test_empty_return():
    p = make_parser(K.RETURN_KW, K.SEMICOLON)
    ret = p.parse_stmt()
    assert isinstance(ret, ReturnStmt)
    assert ret.expr is None
    assert ret.location.col == 1


def test_return_missing_semicolon():
    p = make_parser(K.RETURN_KW, num(1), K.CLOSE_BRACE)
    assert p.parse_return() is None
    assert codes(p) == ["E0012"]
    assert p.diagnostics[0].suggestions[0].replacement_text == ";"


def test_unclosed_block():
    p = make_parser(K.OPEN_BRACE, K.RETURN_KW, K.SEMICOLON)
    assert p.parse_block() is None
    assert p.diagnostics[0].message == "unclosed delimiter"
    assert p.diagnostics[0].help_messages == ["expected `}` to close this delimiter"]


def test_block_recovers_after_bad_statement():
    p = make_parser(
        K.OPEN_BRACE, K.VAR_KW, num(5), K.SEMICOLON,
        K.RETURN_KW, K.SEMICOLON, K.CLOSE_BRACE,
    )
    block = p.parse_block()
    assert block is not None
    assert len(block.stmts) == 1
    assert isinstance(block.stmts[0], ReturnStmt)
    assert p.diagnostics[0].message == "expected identifier"


def test_if_else_if_else_chain():
    p = make_parser(
        K.IF_KW, ident("a"), K.OPEN_BRACE, K.CLOSE_BRACE,
        K.ELSE_KW, K.IF_KW, ident("b"), K.OPEN_BRACE, K.CLOSE_BRACE,
        K.ELSE_KW, K.OPEN_BRACE, K.RETURN_KW, K.SEMICOLON, K.CLOSE_BRACE,
    )
    stmt = p.parse_stmt()
    assert isinstance(stmt, IfStmt)
    assert isinstance(stmt.cond, DeclRefExpr) and stmt.cond.name == "a"
    assert stmt.then_block.stmts == []
    nested = stmt.else_block.stmts[0]
    assert isinstance(nested, IfStmt)
    assert nested.cond.name == "b"
    assert isinstance(nested.else_block.stmts[0], ReturnStmt)
    assert p.at_eof()


def test_if_without_else():
    p = make_parser(K.IF_KW, K.TRUE_KW, K.OPEN_BRACE, K.CLOSE_BRACE)
    stmt = p.parse_if()
    assert isinstance(stmt.cond, BoolLiteral) and stmt.cond.value is True
    assert stmt.else_block is None
    assert p.no_struct_init is False


def test_invalid_else_clause():
    p = make_parser(
        K.IF_KW, ident("a"), K.OPEN_BRACE, K.CLOSE_BRACE, K.ELSE_KW, K.RETURN_KW
    )
    assert p.parse_if() is None
    assert codes(p) == ["E0040"]
    assert p.no_struct_init is False


def test_while_loop():
    p = make_parser(
        K.WHILE_KW, ident("i"), K.OPEN_CARET, num(10),
        K.OPEN_BRACE, K.CONTINUE_KW, K.SEMICOLON, K.CLOSE_BRACE,
    )
    stmt = p.parse_stmt()
    assert isinstance(stmt, WhileStmt)
    assert isinstance(stmt.cond, BinaryOp)
    assert stmt.cond.op is K.OPEN_CARET
    assert isinstance(stmt.body.stmts[0], ContinueStmt)


def test_for_loop():
    p = make_parser(
        K.FOR_KW, ident("i"), K.IN_KW, num(0), K.EXCL_RANGE, num(10),
        K.OPEN_BRACE, K.BREAK_KW, K.SEMICOLON, K.CLOSE_BRACE,
    )
    stmt = p.parse_stmt()
    assert isinstance(stmt, ForStmt)
    assert stmt.loop_var.name == "i"
    assert stmt.loop_var.type is None
    assert stmt.loop_var.init is None
    assert isinstance(stmt.iterable, RangeLiteral)
    assert stmt.iterable.inclusive is False
    assert stmt.iterable.end.value == 10
    assert isinstance(stmt.body.stmts[0], BreakStmt)


def test_for_without_loop_variable():
    p = make_parser(K.FOR_KW, num(1), K.IN_KW)
    assert p.parse_for() is None
    assert codes(p) == ["E0014"]


def test_for_without_in():
    p = make_parser(K.FOR_KW, ident("i"), num(0))
    assert p.parse_for() is None
    assert codes(p) == ["E0015"]
    diag = p.diagnostics[0]
    assert diag.suggestions[0].replacement_text == "in"
    assert [label.is_primary for label in diag.labels] == [True, False]


def test_typed_var_decl():
    p = make_parser(K.VAR_KW, ident("x"), K.COLON, ident("i32"), K.EQUALS, num(5), K.SEMICOLON)
    stmt = p.parse_stmt()
    assert isinstance(stmt, DeclStmt)
    decl = stmt.decl
    assert decl.name == "x"
    assert decl.type == Type(PrimitiveKind.I32)
    assert decl.is_const is False
    assert decl.init.value == 5
    assert p.at_eof()


def test_untyped_const_decl():
    p = make_parser(K.CONST_KW, ident("flag"), K.EQUALS, K.TRUE_KW, K.SEMICOLON)
    stmt = p.parse_decl()
    assert stmt.decl.is_const is True
    assert stmt.decl.type is None
    assert isinstance(stmt.decl.init, BoolLiteral)


def test_decl_with_struct_literal():
    p = make_parser(
        K.VAR_KW, ident("p"), K.EQUALS, ident("Point"),
        K.OPEN_BRACE, ident("x"), K.EQUALS, num(1), K.CLOSE_BRACE, K.SEMICOLON,
    )
    stmt = p.parse_decl()
    init = stmt.decl.init
    assert isinstance(init, StructInitExpr)
    assert init.struct_name == "Point"
    assert [f.field_name for f in init.fields] == ["x"]


def test_decl_missing_assignment():
    p = make_parser(K.VAR_KW, ident("x"), num(5), K.SEMICOLON)
    assert p.parse_decl() is None
    assert codes(p) == ["E0023"]


def test_decl_missing_semicolon():
    p = make_parser(K.VAR_KW, ident("x"), K.EQUALS, num(5), K.CLOSE_BRACE)
    assert p.parse_decl() is None
    assert codes(p) == ["E0025"]


def test_decl_needs_var_or_const():
    p = make_parser(ident("x"))
    assert p.parse_decl() is None
    assert p.diagnostics[0].help_messages == ["expected `var` or `const`"]


@pytest.mark.parametrize(
    "keyword, method, code",
    [
        (K.BREAK_KW, "parse_break", "E0027"),
        (K.CONTINUE_KW, "parse_continue", "E0029"),
    ],
)
def test_loop_control_missing_semicolon(keyword, method, code):
    p = make_parser(keyword, K.CLOSE_BRACE)
    assert getattr(p, method)() is None
    assert codes(p) == [code]


def test_break_wrong_keyword():
    p = make_parser(K.CONTINUE_KW, K.SEMICOLON)
    assert p.parse_break() is None
    assert codes(p) == ["E0026"]


def test_typed_binding():
    p = make_parser(ident("count"), K.COLON, ident("u8"))
    binding = p.parse_typed_binding()
    assert binding == TypedBinding(SrcLocation("t.phi", 1, 1), "count", Type(PrimitiveKind.U8))


def test_typed_binding_custom_type():
    p = make_parser(ident("origin"), K.COLON, ident("Point"))
    assert p.parse_typed_binding().type == Type("Point")


def test_typed_binding_missing_colon():
    p = make_parser(ident("count"), ident("u8"))
    assert p.parse_typed_binding() is None
    assert p.diagnostics[0].message == "expected colon"
    assert p.diagnostics[0].suggestions[0].replacement_text == ":"


def test_expression_statement_consumes_semicolon():
    p = make_parser(ident("x"), K.EQUALS, num(1), K.SEMICOLON)
    stmt = p.parse_stmt()
    assert isinstance(stmt, BinaryOp)
    assert stmt.op is K.EQUALS
    assert p.at_eof()