"""flagclient データモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .rules import evaluate_rule, in_percentage, parse_rule

# フラグ値として保持できる型の閉じた集合
FlagValue = Union[bool, int, float, str, list[Any], dict[str, Any], None]


@dataclass
class FlagUser:
    """フラグ評価対象のユーザー。"""

    key: str
    anonymous: bool = False
    custom: dict[str, Any] = field(default_factory=dict)

    def to_attributes(self) -> dict[str, Any]:
        """ルール評価用の属性マップを返す。"""
        attributes = dict(self.custom)
        attributes["key"] = self.key
        attributes["anonymous"] = self.anonymous
        return attributes


def new_user(key: str, **custom: Any) -> FlagUser:
    """ユーザーを作成する。"""
    return FlagUser(key=key, custom=dict(custom))


def new_anonymous_user(key: str, **custom: Any) -> FlagUser:
    """匿名ユーザーを作成する。"""
    return FlagUser(key=key, anonymous=True, custom=dict(custom))


class Flag(BaseModel):
    """フラグ定義。

    YAML では ``true`` / ``false`` / ``default`` キーで3つの値を指定する。
    生成後は変更不可。
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rule: str = ""
    percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    true_value: FlagValue = Field(default=None, alias="true")
    false_value: FlagValue = Field(default=None, alias="false")
    default_value: FlagValue = Field(default=None, alias="default")

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data: Any) -> Any:
        # YAML 1.1 では true: / false: のキーが bool として読み込まれる
        if isinstance(data, dict):
            return {
                (str(k).lower() if isinstance(k, bool) else k): v for k, v in data.items()
            }
        return data

    @field_validator("rule")
    @classmethod
    def validate_rule(cls, value: str) -> str:
        parse_rule(value)
        return value

    def value(self, flag_key: str, user: FlagUser) -> FlagValue:
        """ユーザーに対するフラグ値を評価する。

        ルール一致かつロールアウト対象なら true、ルール一致でロールアウト外なら
        false、ルール不一致なら default の値を返す。
        """
        if not evaluate_rule(self.rule, user.to_attributes()):
            return self.default_value
        if in_percentage(flag_key, user.key, self.percentage):
            return self.true_value
        return self.false_value
