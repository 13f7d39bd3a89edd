import pytest

from phic.nodes import (
    BinaryOp,
    FieldDecl,
    FunDecl,
    IntLiteral,
    MethodDecl,
    ReturnStmt,
    StructDecl,
)
from phic.parser import Parser
from phic.source import SrcLocation, SrcManager
from phic.tokens import Token, TokenKind
from phic.types import PrimitiveKind, Type

K = TokenKind


def toks(*items):
    out = []
    for col, item in enumerate(items, start=1):
        if isinstance(item, tuple):
            kind, lexeme = item
        else:
            kind, lexeme = item, item.value
        loc = SrcLocation("t.phi", 1, col)
        out.append(Token(loc, loc, kind, lexeme))
    loc = SrcLocation("t.phi", 1, len(items) + 1)
    out.append(Token(loc, loc, K.EOF, ""))
    return out


def ident(name):
    return (K.IDENTIFIER, name)


def test_simple_function():
    tokens = toks(K.FUN_KW, ident("main"), K.OPEN_PAREN, K.CLOSE_PAREN,
                  K.OPEN_BRACE, K.RETURN_KW, K.SEMICOLON, K.CLOSE_BRACE)
    parser = Parser(tokens)
    decls = parser.parse()
    assert len(decls) == 1
    fun = decls[0]
    assert isinstance(fun, FunDecl)
    assert fun.name == "main"
    assert fun.return_type == Type(PrimitiveKind.NULL)
    assert fun.params == []
    assert isinstance(fun.body.stmts[0], ReturnStmt)
    assert parser.diagnostics == []


def test_function_with_params_and_return_type():
    tokens = toks(
        K.FUN_KW, ident("add"), K.OPEN_PAREN,
        K.CONST_KW, ident("a"), K.COLON, ident("i32"), K.COMMA,
        K.VAR_KW, ident("b"), K.COLON, ident("i32"), K.CLOSE_PAREN,
        K.ARROW, ident("i32"), K.OPEN_BRACE,
        K.RETURN_KW, ident("a"), K.PLUS, ident("b"), K.SEMICOLON,
        K.CLOSE_BRACE,
    )
    parser = Parser(tokens)
    (fun,) = parser.parse()
    assert [p.name for p in fun.params] == ["a", "b"]
    assert [p.is_const for p in fun.params] == [True, False]
    assert all(p.type == Type(PrimitiveKind.I32) for p in fun.params)
    assert fun.return_type == Type(PrimitiveKind.I32)
    ret = fun.body.stmts[0]
    assert isinstance(ret.expr, BinaryOp)
    assert ret.expr.op is K.PLUS


def test_invalid_function_name_reports_e0006():
    tokens = toks(K.FUN_KW, (K.INT_LITERAL, "1"), K.OPEN_PAREN, K.CLOSE_PAREN)
    parser = Parser(tokens)
    assert parser.parse() == []
    assert [d.code for d in parser.diagnostics] == ["E0006"]
    assert parser.diagnostics[0].message == "invalid function name"


def test_unexpected_top_level_token_recovers():
    tokens = toks(ident("x"), K.FUN_KW, ident("main"), K.OPEN_PAREN,
                  K.CLOSE_PAREN, K.OPEN_BRACE, K.CLOSE_BRACE)
    parser = Parser(tokens)
    decls = parser.parse()
    assert [d.name for d in decls] == ["main"]
    assert len(parser.diagnostics) == 1
    diag = parser.diagnostics[0]
    assert diag.message == "unexpected token `x`"
    assert diag.help_messages == ["expected `fun` or `struct`"]


def test_param_without_qualifier_reports_error():
    tokens = toks(K.FUN_KW, ident("f"), K.OPEN_PAREN, ident("a"), K.COLON,
                  ident("i32"), K.CLOSE_PAREN, K.OPEN_BRACE, K.CLOSE_BRACE)
    parser = Parser(tokens)
    parser.parse()
    assert parser.diagnostics
    assert parser.diagnostics[0].help_messages == ["expected `const` or `var`"]


def test_struct_with_fields_and_method():
    tokens = toks(
        K.STRUCT_KW, ident("Point"), K.OPEN_BRACE,
        ident("x"), K.COLON, ident("i32"), K.SEMICOLON,
        K.PUBLIC_KW, ident("y"), K.COLON, ident("i32"), K.EQUALS,
        (K.INT_LITERAL, "0"), K.SEMICOLON,
        K.PUBLIC_KW, K.FUN_KW, ident("get"), K.OPEN_PAREN, K.CLOSE_PAREN,
        K.ARROW, ident("i32"), K.OPEN_BRACE, K.RETURN_KW, ident("y"),
        K.SEMICOLON, K.CLOSE_BRACE,
        K.CLOSE_BRACE,
    )
    parser = Parser(tokens)
    (struct,) = parser.parse()
    assert isinstance(struct, StructDecl)
    assert struct.name == "Point"
    assert [f.name for f in struct.fields] == ["x", "y"]
    x, y = struct.fields
    assert x.is_private and x.init is None
    assert not y.is_private
    assert isinstance(y.init, IntLiteral) and y.init.value == 0
    method = struct.method("get")
    assert isinstance(method, MethodDecl)
    assert not method.is_private
    assert method.return_type == Type(PrimitiveKind.I32)
    assert parser.diagnostics == []


def test_parse_method_defaults_to_private():
    tokens = toks(K.FUN_KW, ident("m"), K.OPEN_PAREN, K.CLOSE_PAREN,
                  K.OPEN_BRACE, K.CLOSE_BRACE)
    method = Parser(tokens).parse_method_decl()
    assert isinstance(method, MethodDecl)
    assert method.is_private
    assert method.name == "m"


def test_parse_field_decl_without_initializer():
    tokens = toks(ident("count"), K.COLON, ident("u8"), K.SEMICOLON)
    field = Parser(tokens).parse_field_decl()
    assert isinstance(field, FieldDecl)
    assert field.type == Type(PrimitiveKind.U8)
    assert field.init is None
    assert field.is_private


@pytest.mark.parametrize("qualifier,expected", [(K.CONST_KW, True), (K.VAR_KW, False)])
def test_parse_param_decl(qualifier, expected):
    tokens = toks(qualifier, ident("p"), K.COLON, ident("Point"))
    param = Parser(tokens).parse_param_decl()
    assert param.is_const is expected
    assert param.type == Type("Point")


def test_source_is_registered_with_manager():
    manager = SrcManager()
    Parser(toks(), path="a.phi", source="fun main() {}\n", source_manager=manager)
    assert manager.get_line("a.phi", 1) == "fun main() {}"
    assert manager.line_count("a.phi") == 1


def test_sink_receives_diagnostics():
    received = []
    parser = Parser(toks(ident("oops")), received.append)
    parser.parse()
    assert received == parser.diagnostics
    assert received[0].message == "unexpected token `oops`"