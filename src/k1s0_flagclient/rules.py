"""ルール式の評価とパーセンテージロールアウト

フラグ定義の ``rule`` はユーザー属性に対する比較式の組み合わせで記述する。

    key eq "toto"
    anonymous eq true and (country in ["fr", "jp"] or beta pr)

演算子: eq ne lt gt le ge co(含む) sw(前方一致) ew(後方一致) in pr(属性が存在)
論理演算: and / or / not と括弧。and は or より優先される。
"""

from __future__ import annotations

import functools
import hashlib
import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(
    r"""\s*(?:
        (?P<string>"(?:[^"\\]|\\.)*")
      | (?P<number>-?\d+(?:\.\d+)?)
      | (?P<punct>[()\[\],])
      | (?P<word>[A-Za-z_][A-Za-z0-9_.\-]*)
    )""",
    re.VERBOSE,
)

_OPERATORS = frozenset({"eq", "ne", "lt", "gt", "le", "ge", "co", "sw", "ew", "in", "pr"})


class _Node(Protocol):
    def matches(self, attributes: Mapping[str, Any]) -> bool: ...


def _equal(left: Any, right: Any) -> bool:
    # True == 1 を一致とみなさない
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return bool(left == right)


@dataclass(frozen=True)
class _Compare:
    attribute: str
    op: str
    operand: Any = None

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        if self.attribute not in attributes:
            return False
        if self.op == "pr":
            return attributes[self.attribute] is not None
        value = attributes[self.attribute]
        operand = self.operand
        if self.op == "eq":
            return _equal(value, operand)
        if self.op == "ne":
            return not _equal(value, operand)
        if self.op == "in":
            return any(_equal(value, item) for item in operand)
        if self.op == "co":
            if isinstance(value, str) and isinstance(operand, str):
                return operand in value
            if isinstance(value, list):
                return any(_equal(item, operand) for item in value)
            return False
        if self.op in ("sw", "ew"):
            if not (isinstance(value, str) and isinstance(operand, str)):
                return False
            if self.op == "sw":
                return value.startswith(operand)
            return value.endswith(operand)
        try:
            if self.op == "lt":
                return bool(value < operand)
            if self.op == "gt":
                return bool(value > operand)
            if self.op == "le":
                return bool(value <= operand)
            return bool(value >= operand)
        except TypeError:
            return False


@dataclass(frozen=True)
class _And:
    left: _Node
    right: _Node

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        return self.left.matches(attributes) and self.right.matches(attributes)


@dataclass(frozen=True)
class _Or:
    left: _Node
    right: _Node

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        return self.left.matches(attributes) or self.right.matches(attributes)


@dataclass(frozen=True)
class _Not:
    node: _Node

    def matches(self, attributes: Mapping[str, Any]) -> bool:
        return not self.node.matches(attributes)


def _tokenize(rule: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    rule = rule.rstrip()
    while pos < len(rule):
        m = _TOKEN_RE.match(rule, pos)
        if m is None or m.end() == pos:
            raise ValueError(f"unexpected character at {pos}: {rule[pos:]!r}")
        kind = m.lastgroup or ""
        tokens.append((kind, m.group(kind)))
        pos = m.end()
    return tokens


class _Parser:
    def __init__(self, rule: str) -> None:
        self._tokens = _tokenize(rule)
        self._pos = 0

    def parse(self) -> _Node:
        node = self._expr()
        if self._pos != len(self._tokens):
            raise ValueError(f"unexpected token: {self._tokens[self._pos][1]!r}")
        return node

    def _peek(self) -> tuple[str, str] | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _next(self) -> tuple[str, str]:
        token = self._peek()
        if token is None:
            raise ValueError("unexpected end of rule")
        self._pos += 1
        return token

    def _accept_word(self, word: str) -> bool:
        token = self._peek()
        if token is not None and token[0] == "word" and token[1].lower() == word:
            self._pos += 1
            return True
        return False

    def _expect_punct(self, punct: str) -> None:
        kind, text = self._next()
        if kind != "punct" or text != punct:
            raise ValueError(f"expected {punct!r}, got {text!r}")

    def _expr(self) -> _Node:
        node = self._and_expr()
        while self._accept_word("or"):
            node = _Or(node, self._and_expr())
        return node

    def _and_expr(self) -> _Node:
        node = self._unary()
        while self._accept_word("and"):
            node = _And(node, self._unary())
        return node

    def _unary(self) -> _Node:
        if self._accept_word("not"):
            return _Not(self._unary())
        token = self._peek()
        if token == ("punct", "("):
            self._pos += 1
            node = self._expr()
            self._expect_punct(")")
            return node
        return self._comparison()

    def _comparison(self) -> _Node:
        kind, attribute = self._next()
        if kind != "word":
            raise ValueError(f"expected attribute name, got {attribute!r}")
        kind, op = self._next()
        op = op.lower()
        if kind != "word" or op not in _OPERATORS:
            raise ValueError(f"unknown operator: {op!r}")
        if op == "pr":
            return _Compare(attribute, op)
        operand = self._literal()
        if op == "in" and not isinstance(operand, list):
            raise ValueError("operator 'in' requires a list")
        return _Compare(attribute, op, operand)

    def _literal(self) -> Any:
        kind, text = self._next()
        if kind == "string":
            return json.loads(text)
        if kind == "number":
            return float(text) if "." in text else int(text)
        if kind == "word" and text.lower() in ("true", "false"):
            return text.lower() == "true"
        if kind == "punct" and text == "[":
            items: list[Any] = []
            if self._peek() == ("punct", "]"):
                self._pos += 1
                return items
            while True:
                items.append(self._literal())
                kind, text = self._next()
                if text == "]":
                    return items
                if text != ",":
                    raise ValueError(f"expected ',' or ']', got {text!r}")
        raise ValueError(f"expected literal, got {text!r}")


@functools.lru_cache(maxsize=256)
def parse_rule(rule: str) -> _Node | None:
    """ルール式を構文解析する。空のルールは None。

    Raises:
        ValueError: ルール式が不正な場合
    """
    if not rule.strip():
        return None
    return _Parser(rule).parse()


def evaluate_rule(rule: str, attributes: Mapping[str, Any]) -> bool:
    """ルール式をユーザー属性に対して評価する。空のルールは常に一致。"""
    try:
        node = parse_rule(rule)
    except ValueError as e:
        logger.warning("Invalid flag rule", extra={"rule": rule, "error": str(e)})
        return False
    if node is None:
        return True
    return node.matches(attributes)


def in_percentage(flag_key: str, user_key: str, percentage: float) -> bool:
    """ユーザーがロールアウト対象のパーセンテージに含まれるか判定する。

    バケットは sha256(flag_key + user_key) の先頭 32 ビットを 100 で割った余り。
    """
    if percentage <= 0:
        return False
    if percentage >= 100:
        return True
    digest = hashlib.sha256(f"{flag_key}{user_key}".encode("utf-8")).hexdigest()
    bucket = int(digest[:8], 16) % 100
    return bucket < percentage
