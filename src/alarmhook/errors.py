from __future__ import annotations

import enum


class FailureKind(str, enum.Enum):
    SERIALIZATION = "serialization"
    MALFORMED_DESTINATION = "malformed_destination"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"


class AlarmCallbackError(Exception):
    """
    所有 callback 错误的基类。

    kind 用于 DeliveryOutcome 分类；配置类错误没有 kind（不属于投递失败）。
    """

    kind: FailureKind | None = None


class ConfigurationError(AlarmCallbackError):
    pass


class SerializationError(AlarmCallbackError):
    kind = FailureKind.SERIALIZATION


class TransportError(AlarmCallbackError):
    kind = FailureKind.TRANSPORT


class MalformedUrlError(TransportError):
    kind = FailureKind.MALFORMED_DESTINATION


class DeliveryError(AlarmCallbackError):
    kind = FailureKind.HTTP_STATUS

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(
            message or f"Expected successful HTTP response [2xx] but got [{status_code}]."
        )
