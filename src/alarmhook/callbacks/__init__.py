from __future__ import annotations

from ..encoding import Encoder, JsonEncoder
from ..errors import ConfigurationError
from ..http_utils import HttpTransport
from .base import AlarmCallback, DeliveryOutcome
from .payload import build_event_payload
from .webhook import HttpAlarmCallback

CALLBACK_TYPES: dict[str, type[HttpAlarmCallback]] = {
    "http": HttpAlarmCallback,
}


def create_callback(
    callback_type: str,
    *,
    transport: HttpTransport,
    encoder: Encoder | None = None,
) -> AlarmCallback:
    cls = CALLBACK_TYPES.get(callback_type)
    if cls is None:
        known = ", ".join(sorted(CALLBACK_TYPES))
        raise ConfigurationError(f"Unknown callback type {callback_type!r} (known: {known})")
    return cls(transport=transport, encoder=encoder or JsonEncoder())


__all__ = [
    "AlarmCallback",
    "CALLBACK_TYPES",
    "DeliveryOutcome",
    "HttpAlarmCallback",
    "build_event_payload",
    "create_callback",
]
