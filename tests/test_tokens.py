import pytest

from phic.source import SrcLocation, SrcSpan
from phic.tokens import (
    Token,
    TokenKind,
    infix_bp,
    kind_name,
    postfix_bp,
    prefix_bp,
    span_from_token,
)

ASSIGNMENTS = [
    TokenKind.EQUALS,
    TokenKind.PLUS_EQUALS,
    TokenKind.SUB_EQUALS,
    TokenKind.MUL_EQUAL,
    TokenKind.DIV_EQUALS,
    TokenKind.MOD_EQUALS,
]


@pytest.mark.parametrize("kind", ASSIGNMENTS)
def test_assignment_is_right_associative_and_lowest(kind):
    left, right = infix_bp(kind)
    assert (left, right) == (2, 1)
    assert left > right


def test_other_infix_are_left_associative():
    for kind in TokenKind:
        bp = infix_bp(kind)
        if bp is None or kind in ASSIGNMENTS:
            continue
        assert bp[1] == bp[0] + 1


def test_precedence_order():
    assert infix_bp(TokenKind.DOUBLE_PIPE) < infix_bp(TokenKind.DOUBLE_AMP)
    assert infix_bp(TokenKind.DOUBLE_AMP) < infix_bp(TokenKind.DOUBLE_EQUALS)
    assert infix_bp(TokenKind.DOUBLE_EQUALS) < infix_bp(TokenKind.OPEN_CARET)
    assert infix_bp(TokenKind.OPEN_CARET) < infix_bp(TokenKind.EXCL_RANGE)
    assert infix_bp(TokenKind.EXCL_RANGE) < infix_bp(TokenKind.PLUS)
    assert infix_bp(TokenKind.PLUS) < infix_bp(TokenKind.STAR)
    assert infix_bp(TokenKind.STAR) < infix_bp(TokenKind.PERIOD)


def test_same_level_operators_share_power():
    assert infix_bp(TokenKind.PLUS) == infix_bp(TokenKind.MINUS)
    assert infix_bp(TokenKind.STAR) == infix_bp(TokenKind.PERCENT)
    assert infix_bp(TokenKind.INCL_RANGE) == infix_bp(TokenKind.EXCL_RANGE)


@pytest.mark.parametrize(
    "kind", [TokenKind.MINUS, TokenKind.BANG, TokenKind.DOUBLE_PLUS, TokenKind.DOUBLE_MINUS]
)
def test_prefix_operators(kind):
    assert prefix_bp(kind) == 17


@pytest.mark.parametrize(
    "kind",
    [TokenKind.DOUBLE_PLUS, TokenKind.DOUBLE_MINUS, TokenKind.OPEN_PAREN, TokenKind.OPEN_BRACE],
)
def test_postfix_operators_bind_tightest(kind):
    left, _ = postfix_bp(kind)
    assert left == 19
    assert left > max(bp[0] for bp in map(infix_bp, TokenKind) if bp)
    assert left > prefix_bp(TokenKind.MINUS)


@pytest.mark.parametrize(
    "kind", [TokenKind.IDENTIFIER, TokenKind.SEMICOLON, TokenKind.COMMA, TokenKind.EOF]
)
def test_non_operators(kind):
    assert infix_bp(kind) is None
    assert prefix_bp(kind) is None
    assert postfix_bp(kind) is None


def test_bang_is_only_prefix():
    assert infix_bp(TokenKind.BANG) is None
    assert postfix_bp(TokenKind.BANG) is None


def test_kind_names_are_distinct():
    names = [kind_name(k) for k in TokenKind]
    assert len(set(names)) == len(names)
    assert kind_name(TokenKind.OPEN_BRACE) == "{"
    assert kind_name(TokenKind.FUN_KW) == "fun"


def test_span_from_token():
    start = SrcLocation("a.phi", 1, 1)
    end = SrcLocation("a.phi", 1, 3)
    tok = Token(start, end, TokenKind.FUN_KW, "fun")
    assert span_from_token(tok) == SrcSpan(start, end)