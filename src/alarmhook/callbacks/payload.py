from __future__ import annotations

from typing import Any

from ..models import AlertEvent


def build_event_payload(event: AlertEvent) -> dict[str, Any]:
    """
    v0：POST 请求体固定为两个顶层 key：stream 与 check_result。
    """
    return {
        "stream": event.stream.to_json_dict(),
        "check_result": event.check_result.to_json_dict(),
    }
