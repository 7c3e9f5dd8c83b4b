from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Mapping, Protocol

from .errors import SerializationError


class Encoder(Protocol):
    """
    payload 编码器：把 JSON 友好的对象编码为请求体字节。失败抛 SerializationError。
    """

    def encode(self, payload: Mapping[str, Any]) -> bytes: ...


def _default(value: Any) -> Any:
    to_json_dict = getattr(value, "to_json_dict", None)
    if callable(to_json_dict):
        return to_json_dict()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonEncoder:
    """
    标准库 json 编码：datetime 使用 ISO8601 字符串，带 to_json_dict() 的对象递归展开。

    NaN/Infinity 不是合法 JSON，直接视为编码失败。
    """

    def __init__(self, *, ensure_ascii: bool = False) -> None:
        self._ensure_ascii = ensure_ascii

    def encode(self, payload: Mapping[str, Any]) -> bytes:
        try:
            text = json.dumps(payload, default=_default, ensure_ascii=self._ensure_ascii, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise SerializationError("Unable to serialize alarm") from e
        return text.encode("utf-8")
