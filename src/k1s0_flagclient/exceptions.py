"""flagclient ライブラリの例外型定義"""

from __future__ import annotations


class FlagClientError(Exception):
    """flagclient ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class FlagClientErrorCodes:
    """FlagClientError のエラーコード定数。"""

    NOT_INITIALIZED: str = "NOT_INITIALIZED"
    RETRIEVE_ERROR: str = "RETRIEVE_ERROR"
    PARSE_ERROR: str = "PARSE_ERROR"
    VALIDATION_ERROR: str = "VALIDATION_ERROR"
