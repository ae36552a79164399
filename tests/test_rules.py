"""ルール評価とロールアウトのユニットテスト"""

import pytest
from k1s0_flagclient import evaluate_rule, in_percentage, parse_rule


def test_empty_rule_always_matches() -> None:
    """空のルールは常に一致。"""
    assert evaluate_rule("", {}) is True
    assert evaluate_rule("   ", {"key": "a"}) is True


@pytest.mark.parametrize(
    "rule,attributes,expected",
    [
        ('key eq "toto"', {"key": "toto"}, True),
        ('key eq "toto"', {"key": "titi"}, False),
        ('key ne "toto"', {"key": "titi"}, True),
        ("anonymous eq true", {"anonymous": True}, True),
        ("anonymous eq true", {"anonymous": False}, False),
        ("age gt 18", {"age": 20}, True),
        ("age le 18", {"age": 18}, True),
        ("age lt 18.5", {"age": 18}, True),
        ("age ge 18", {"age": "old"}, False),
        ('email ew "@example.com"', {"email": "a@example.com"}, True),
        ('email sw "admin"', {"email": "a@example.com"}, False),
        ('name co "ot"', {"name": "toto"}, True),
        ('country in ["fr", "jp"]', {"country": "jp"}, True),
        ('country in ["fr", "jp"]', {"country": "us"}, False),
        ("beta pr", {"beta": "yes"}, True),
        ("beta pr", {}, False),
        ('key eq "toto"', {}, False),
    ],
)
def test_comparisons(rule: str, attributes: dict, expected: bool) -> None:
    """比較演算子の評価。"""
    assert evaluate_rule(rule, attributes) is expected


def test_bool_is_not_equal_to_int() -> None:
    """true と 1 は一致しない。"""
    assert evaluate_rule("flag eq 1", {"flag": True}) is False


def test_and_or_not_precedence() -> None:
    """and は or より優先される。"""
    attrs = {"a": 1, "b": 2, "c": 3}
    assert evaluate_rule("a eq 0 and b eq 2 or c eq 3", attrs) is True
    assert evaluate_rule("a eq 0 and (b eq 2 or c eq 3)", attrs) is False
    assert evaluate_rule("not a eq 0", attrs) is True
    assert evaluate_rule("A EQ 1 AND not b eq 3", {"A": 1, "b": 2}) is True


@pytest.mark.parametrize(
    "rule",
    [
        "key",
        'key xx "a"',
        'key eq "a" and',
        '(key eq "a"',
        'key in "a"',
        "key eq [1, 2",
        'key eq "a" )',
        "key eq @",
    ],
)
def test_parse_rule_invalid(rule: str) -> None:
    """不正なルールで ValueError が発生すること。"""
    with pytest.raises(ValueError):
        parse_rule(rule)


def test_invalid_rule_never_matches() -> None:
    """不正なルールは例外にならず不一致。"""
    assert evaluate_rule("key xx", {"key": "a"}) is False


def test_percentage_bounds() -> None:
    """0% は常に対象外、100% は常に対象。"""
    assert in_percentage("flag", "user", 0) is False
    assert in_percentage("flag", "user", 100) is True


def test_percentage_is_deterministic() -> None:
    """同じフラグとユーザーは常に同じ結果。"""
    results = {in_percentage("test-flag", "random-key", 50) for _ in range(10)}
    assert len(results) == 1


def test_percentage_bucket() -> None:
    """バケットは sha256 の先頭 32 ビットで決まる。"""
    # test-flag + random-key はバケット 14、user-3 はバケット 66
    assert in_percentage("test-flag", "random-key", 15) is True
    assert in_percentage("test-flag", "random-key", 14) is False
    assert in_percentage("test-flag", "user-3", 50) is False
    assert in_percentage("test-flag", "user-3", 67) is True


def test_parse_rule_all_token_kinds() -> None:
    """文字列・数値・括弧・リスト・単語を含むルールを解析できること。"""
    rule = 'not (age lt 18.5) and country in ["fr", "jp"] or key eq "toto"'
    assert parse_rule(rule) is not None
    assert evaluate_rule(rule, {"age": 20, "country": "jp", "key": "x"}) is True
    assert evaluate_rule(rule, {"age": 10, "country": "jp", "key": "x"}) is False
