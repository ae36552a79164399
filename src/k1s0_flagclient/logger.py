"""FlagClient ごとの structlog ロガー"""

from __future__ import annotations

import logging
from typing import Any

import structlog

from .config import LogSection

LOGGER_NAME = "k1s0_flagclient"


def new_client_logger(
    log: LogSection, logger: Any = None, **context: Any
) -> structlog.typing.FilteringBoundLogger:
    """クライアント専用のロガーを返す。

    レベル判定とレンダリングはロガー単位で行い、logging / structlog の
    グローバル設定は変更しない。出力先の既定は標準 logging の
    ``k1s0_flagclient`` ロガー。

    Args:
        log: ログ設定 (level, format)
        logger: 出力先ロガー
        context: 全ログに付与するコンテキスト
    """
    level = getattr(logging, log.level.upper(), logging.INFO)
    renderer: structlog.typing.Processor
    if log.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    bound: structlog.typing.FilteringBoundLogger = structlog.wrap_logger(
        logger if logger is not None else logging.getLogger(LOGGER_NAME),
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
    )
    return bound.bind(**context)
