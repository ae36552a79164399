"""フラグ設定の取得元 (Retriever)"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .exceptions import FlagClientError, FlagClientErrorCodes


class Retriever(Protocol):
    """フラグ設定の生バイト列を取得するプロトコル。"""

    def retrieve(self) -> bytes: ...


class LocalFileRetriever:
    """ローカルファイルからフラグ設定を読み込む Retriever。"""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def retrieve(self) -> bytes:
        """ファイル全体を読み込んで返す。

        Raises:
            FlagClientError: ファイルを読み込めない場合 (RETRIEVE_ERROR)
        """
        try:
            return self._path.read_bytes()
        except OSError as e:
            raise FlagClientError(
                code=FlagClientErrorCodes.RETRIEVE_ERROR,
                message=f"Failed to read flag file: {self._path}",
                cause=e,
            ) from e


def new_local_file_retriever(path: str | Path) -> Retriever:
    """ローカルファイル Retriever を作成する。"""
    return LocalFileRetriever(path)
