"""型付きフラグ値の解決"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from .cache import FlagCache
from .exceptions import FlagClientError, FlagClientErrorCodes
from .models import FlagUser

logger = logging.getLogger(__name__)

T = TypeVar("T")

ERROR_CACHE_NOT_INIT = "impossible to read the flag before the initialisation"


class ValueKind(Enum):
    """解決できる値の種類。"""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    JSON_ARRAY = "json_array"
    JSON = "json"

    @property
    def zero(self) -> Any:
        """型のゼロ値。"""
        if self is ValueKind.BOOL:
            return False
        if self is ValueKind.INT:
            return 0
        if self is ValueKind.FLOAT:
            return 0.0
        if self is ValueKind.STRING:
            return ""
        if self is ValueKind.JSON_ARRAY:
            return []
        return {}

    def accepts(self, value: Any) -> bool:
        """値の実行時型がこの種類と一致するか。bool は int とみなさない。"""
        if self is ValueKind.BOOL:
            return type(value) is bool
        if self is ValueKind.INT:
            return type(value) is int
        if self is ValueKind.FLOAT:
            return type(value) is float
        if self is ValueKind.STRING:
            return isinstance(value, str)
        if self is ValueKind.JSON_ARRAY:
            return isinstance(value, list)
        return isinstance(value, dict)


class Reason(str, Enum):
    """解決結果の分類。"""

    ERROR = "ERROR"
    DEFAULT = "DEFAULT"
    RESOLVED = "RESOLVED"


@dataclass
class VariationResult(Generic[T]):
    """フラグ値の解決結果。"""

    flag_key: str
    value: T
    reason: Reason
    error: FlagClientError | None = None


class VariationResolver:
    """キャッシュを読み取り、フラグ値を要求された型で返す。

    キャッシュが未初期化の場合のみエラーとなる。キーが存在しない、または
    評価結果の型が一致しない場合は呼び出し側のデフォルト値を返す。
    """

    def __init__(self, cache: FlagCache) -> None:
        self._cache = cache

    def variation_detail(
        self, flag_key: str, user: FlagUser, default: T, kind: ValueKind
    ) -> VariationResult[T]:
        flags = self._cache.snapshot()
        if flags is None:
            return VariationResult(
                flag_key=flag_key,
                value=kind.zero,
                reason=Reason.ERROR,
                error=FlagClientError(
                    FlagClientErrorCodes.NOT_INITIALIZED, ERROR_CACHE_NOT_INIT
                ),
            )

        flag = flags.get(flag_key)
        if flag is None:
            logger.debug("Flag not found, using default", extra={"flag_key": flag_key})
            return VariationResult(flag_key=flag_key, value=default, reason=Reason.DEFAULT)

        value = flag.value(flag_key, user)
        if not kind.accepts(value):
            logger.debug(
                "Flag value type mismatch, using default",
                extra={
                    "flag_key": flag_key,
                    "expected": kind.value,
                    "actual": type(value).__name__,
                },
            )
            return VariationResult(flag_key=flag_key, value=default, reason=Reason.DEFAULT)

        if kind in (ValueKind.JSON_ARRAY, ValueKind.JSON):
            value = copy.deepcopy(value)
        return VariationResult(flag_key=flag_key, value=value, reason=Reason.RESOLVED)

    def _variation(self, flag_key: str, user: FlagUser, default: T, kind: ValueKind) -> T:
        result = self.variation_detail(flag_key, user, default, kind)
        if result.error is not None:
            raise result.error
        return result.value

    def bool_variation(self, flag_key: str, user: FlagUser, default: bool) -> bool:
        """フラグ値を bool で返す。

        Raises:
            FlagClientError: キャッシュが未初期化の場合 (NOT_INITIALIZED)
        """
        return self._variation(flag_key, user, default, ValueKind.BOOL)

    def int_variation(self, flag_key: str, user: FlagUser, default: int) -> int:
        return self._variation(flag_key, user, default, ValueKind.INT)

    def float_variation(self, flag_key: str, user: FlagUser, default: float) -> float:
        return self._variation(flag_key, user, default, ValueKind.FLOAT)

    def string_variation(self, flag_key: str, user: FlagUser, default: str) -> str:
        return self._variation(flag_key, user, default, ValueKind.STRING)

    def json_array_variation(
        self, flag_key: str, user: FlagUser, default: list[Any]
    ) -> list[Any]:
        return self._variation(flag_key, user, default, ValueKind.JSON_ARRAY)

    def json_variation(
        self, flag_key: str, user: FlagUser, default: dict[str, Any]
    ) -> dict[str, Any]:
        return self._variation(flag_key, user, default, ValueKind.JSON)
