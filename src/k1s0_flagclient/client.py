"""FlagClient 実装"""

from __future__ import annotations

from typing import Any, TypeVar

import structlog

from .cache import FlagCache
from .config import FlagClientConfig
from .exceptions import FlagClientError, FlagClientErrorCodes
from .loader import refresh_cache
from .logger import new_client_logger
from .models import FlagUser
from .retriever import LocalFileRetriever, Retriever
from .variation import ValueKind, VariationResolver, VariationResult

T = TypeVar("T")


class FlagClient:
    """フィーチャーフラグクライアント。

    start() でフラグ設定を読み込み、close() でキャッシュを未初期化状態に戻す。
    定期的な再読み込みは呼び出し側のスケジューラから refresh() を呼ぶ。
    logger には出力先ロガーを渡せる。省略時は標準 logging の k1s0_flagclient。
    """

    def __init__(
        self,
        config: FlagClientConfig,
        retriever: Retriever | None = None,
        logger: Any = None,
    ) -> None:
        if retriever is None:
            if config.local_file is None:
                raise FlagClientError(
                    code=FlagClientErrorCodes.VALIDATION_ERROR,
                    message="No retriever configured: set local_file or pass a retriever",
                )
            retriever = LocalFileRetriever(config.local_file)
        self._config = config
        self._retriever = retriever
        self._cache = FlagCache()
        self._resolver = VariationResolver(self._cache)
        self._logger: structlog.typing.FilteringBoundLogger = new_client_logger(
            config.log, logger, retriever=type(retriever).__name__
        )

    @property
    def cache(self) -> FlagCache:
        return self._cache

    def start(self) -> None:
        """フラグ設定を初回読み込みする。"""
        count = refresh_cache(self._cache, self._retriever)
        self._logger.bind(flag_count=count).info("flag client started")

    def refresh(self) -> None:
        """フラグ設定を再読み込みする。失敗時は直前のキャッシュを維持する。"""
        count = refresh_cache(self._cache, self._retriever)
        self._logger.bind(flag_count=count).debug("flags refreshed")

    def close(self) -> None:
        """キャッシュを破棄する。"""
        self._cache.close()
        self._logger.info("flag client closed")

    def __enter__(self) -> FlagClient:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def variation_detail(
        self, flag_key: str, user: FlagUser, default: T, kind: ValueKind
    ) -> VariationResult[T]:
        return self._resolver.variation_detail(flag_key, user, default, kind)

    def bool_variation(self, flag_key: str, user: FlagUser, default: bool) -> bool:
        return self._resolver.bool_variation(flag_key, user, default)

    def int_variation(self, flag_key: str, user: FlagUser, default: int) -> int:
        return self._resolver.int_variation(flag_key, user, default)

    def float_variation(self, flag_key: str, user: FlagUser, default: float) -> float:
        return self._resolver.float_variation(flag_key, user, default)

    def string_variation(self, flag_key: str, user: FlagUser, default: str) -> str:
        return self._resolver.string_variation(flag_key, user, default)

    def json_array_variation(
        self, flag_key: str, user: FlagUser, default: list[Any]
    ) -> list[Any]:
        return self._resolver.json_array_variation(flag_key, user, default)

    def json_variation(
        self, flag_key: str, user: FlagUser, default: dict[str, Any]
    ) -> dict[str, Any]:
        return self._resolver.json_variation(flag_key, user, default)
