"""
alarmhook

告警系统中的一个通知出口：条件触发时，把触发事件（stream + check result）
编码为 JSON，通过一次 HTTP POST 投递到用户配置的 URL。
条件评估、调度、插件加载与配置持久化都由宿主负责。
"""

from .callbacks import AlarmCallback, DeliveryOutcome, HttpAlarmCallback
from .configuration import Configuration, ConfigurationRequest, TextField
from .errors import (
    AlarmCallbackError,
    ConfigurationError,
    DeliveryError,
    FailureKind,
    MalformedUrlError,
    SerializationError,
    TransportError,
)
from .models import AlertCondition, AlertEvent, CheckResult, MessageSummary, Stream, StreamRule

__all__ = [
    "AlarmCallback",
    "AlarmCallbackError",
    "AlertCondition",
    "AlertEvent",
    "CheckResult",
    "Configuration",
    "ConfigurationError",
    "ConfigurationRequest",
    "DeliveryError",
    "DeliveryOutcome",
    "FailureKind",
    "HttpAlarmCallback",
    "MalformedUrlError",
    "MessageSummary",
    "SerializationError",
    "Stream",
    "StreamRule",
    "TextField",
    "TransportError",
]
