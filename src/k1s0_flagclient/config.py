"""クライアント設定 (pydantic BaseModel)"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import FlagClientError, FlagClientErrorCodes


class LogSection(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class FlagClientConfig(BaseModel):
    """フラグクライアント設定。"""

    local_file: str | None = None
    log: LogSection = Field(default_factory=LogSection)


def load_config(path: Path) -> FlagClientConfig:
    """YAML 設定ファイルを読み込んで FlagClientConfig を返す。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FlagClientError(
            code=FlagClientErrorCodes.RETRIEVE_ERROR,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data: dict[str, Any] = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise FlagClientError(
            code=FlagClientErrorCodes.PARSE_ERROR,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    try:
        return FlagClientConfig.model_validate(data)
    except ValidationError as e:
        raise FlagClientError(
            code=FlagClientErrorCodes.VALIDATION_ERROR,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
