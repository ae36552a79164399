"""FlagCache 実装"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from .models import Flag

logger = logging.getLogger(__name__)


class FlagCache:
    """フラグキーからフラグ定義へのキャッシュ。

    状態は3つ: 未初期化 (マッピングなし)、初期化済みで空、フラグあり。
    更新はマッピング全体の参照差し替えで行い、読み取り側は常に
    一貫したスナップショットを参照する。
    """

    def __init__(self, flags: Mapping[str, Flag] | None = None) -> None:
        self._flags: Mapping[str, Flag] | None = None
        if flags is not None:
            self._flags = MappingProxyType(dict(flags))

    @property
    def is_initialized(self) -> bool:
        return self._flags is not None

    def snapshot(self) -> Mapping[str, Flag] | None:
        """現在のマッピングを返す。未初期化なら None。"""
        return self._flags

    def get(self, flag_key: str) -> Flag | None:
        flags = self._flags
        if flags is None:
            return None
        return flags.get(flag_key)

    def replace(self, flags: Mapping[str, Flag]) -> None:
        """マッピング全体を差し替える。"""
        self._flags = MappingProxyType(dict(flags))
        logger.info("Flag cache replaced", extra={"flag_count": len(flags)})

    def close(self) -> None:
        """未初期化状態に戻す。"""
        self._flags = None

    def keys(self) -> list[str]:
        flags = self._flags
        return list(flags) if flags is not None else []

    def __contains__(self, flag_key: object) -> bool:
        flags = self._flags
        return flags is not None and flag_key in flags

    def __len__(self) -> int:
        flags = self._flags
        return len(flags) if flags is not None else 0

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())
