"""データモデルのユニットテスト"""

import pytest
from k1s0_flagclient import Flag, FlagUser, new_anonymous_user, new_user
from pydantic import ValidationError


def test_flag_user_defaults() -> None:
    """FlagUser のデフォルト値。"""
    user = FlagUser(key="u1")
    assert user.anonymous is False
    assert user.custom == {}


def test_new_user_with_custom_attributes() -> None:
    """カスタム属性付きユーザーの作成。"""
    user = new_user("u1", country="jp")
    assert user.key == "u1"
    assert user.anonymous is False
    assert user.to_attributes() == {"country": "jp", "key": "u1", "anonymous": False}


def test_new_anonymous_user() -> None:
    """匿名ユーザーの作成。"""
    user = new_anonymous_user("u2")
    assert user.anonymous is True
    assert user.to_attributes()["anonymous"] is True


def test_custom_attributes_cannot_override_key() -> None:
    """key / anonymous はカスタム属性より優先される。"""
    user = FlagUser(key="u1", custom={"key": "other", "anonymous": True})
    attributes = user.to_attributes()
    assert attributes["key"] == "u1"
    assert attributes["anonymous"] is False


def test_flag_from_yaml_style_mapping() -> None:
    """YAML 読み込み時の bool キーを受け付けること。"""
    flag = Flag.model_validate(
        {"rule": 'key eq "toto"', "percentage": 100, True: True, False: False, "default": False}
    )
    assert flag.rule == 'key eq "toto"'
    assert flag.percentage == 100.0
    assert flag.true_value is True
    assert flag.false_value is False
    assert flag.default_value is False


def test_flag_keeps_value_types() -> None:
    """スカラー値の型が保持されること。"""
    flag = Flag.model_validate({"true": 1, "false": 1.5, "default": "1"})
    assert type(flag.true_value) is int
    assert type(flag.false_value) is float
    assert type(flag.default_value) is str


def test_flag_invalid_percentage() -> None:
    """範囲外のパーセンテージは ValidationError。"""
    with pytest.raises(ValidationError):
        Flag(percentage=101)
    with pytest.raises(ValidationError):
        Flag(percentage=-1)


def test_flag_invalid_rule() -> None:
    """不正なルールは生成時に ValidationError。"""
    with pytest.raises(ValidationError):
        Flag(rule="key xx")


def test_flag_is_frozen() -> None:
    """フラグ定義は変更できないこと。"""
    flag = Flag(percentage=100, true_value=True)
    with pytest.raises(ValidationError):
        flag.percentage = 0  # type: ignore[misc]


def test_flag_value_branches() -> None:
    """ルールとパーセンテージで true / false / default を選ぶ。"""
    flag = Flag(
        rule='key eq "toto"', percentage=100, true_value="t", false_value="f", default_value="d"
    )
    assert flag.value("test-flag", new_user("toto")) == "t"
    assert flag.value("test-flag", new_user("titi")) == "d"
    off = Flag(rule='key eq "toto"', percentage=0, true_value="t", false_value="f")
    assert off.value("test-flag", new_user("toto")) == "f"


def test_flag_empty_rule_matches_everyone() -> None:
    """空のルールは全ユーザーに一致。"""
    flag = Flag(percentage=100, true_value=True, default_value=False)
    assert flag.value("test-flag", new_anonymous_user("anyone")) is True
