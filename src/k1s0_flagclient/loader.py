"""フラグ設定の読み込み"""

from __future__ import annotations

import logging
from typing import Any

import yaml
from pydantic import ValidationError

from .cache import FlagCache
from .exceptions import FlagClientError, FlagClientErrorCodes
from .models import Flag
from .retriever import Retriever

logger = logging.getLogger(__name__)


def load_flags(raw: bytes) -> dict[str, Flag]:
    """YAML のフラグ設定を解析してフラグ定義のマッピングを返す。

    空のドキュメントは空のマッピングになる。
    """
    try:
        data: Any = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise FlagClientError(
            code=FlagClientErrorCodes.PARSE_ERROR,
            message="Failed to parse flag file",
            cause=e,
        ) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FlagClientError(
            code=FlagClientErrorCodes.PARSE_ERROR,
            message=f"Flag file must be a mapping, got {type(data).__name__}",
        )

    flags: dict[str, Flag] = {}
    for flag_key, definition in data.items():
        try:
            flags[str(flag_key)] = Flag.model_validate(definition)
        except ValidationError as e:
            raise FlagClientError(
                code=FlagClientErrorCodes.VALIDATION_ERROR,
                message=f"Invalid flag definition: {flag_key}",
                cause=e,
            ) from e
    return flags


def refresh_cache(cache: FlagCache, retriever: Retriever) -> int:
    """Retriever からフラグ設定を取得してキャッシュを差し替える。

    失敗した場合はキャッシュを変更せずに例外を送出する。
    """
    try:
        flags = load_flags(retriever.retrieve())
    except FlagClientError as e:
        logger.error("Failed to load flags", extra={"code": e.code, "error": str(e)})
        raise
    cache.replace(flags)
    return len(flags)
