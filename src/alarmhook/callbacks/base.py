from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from ..configuration import Configuration, ConfigurationRequest
from ..errors import AlarmCallbackError, FailureKind
from ..models import AlertEvent


@dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    """
    单次投递结果：ok=True 表示成功；失败时 kind 给出分类，error 保留原始异常。
    """

    ok: bool
    kind: FailureKind | None = None
    status_code: int | None = None
    error: AlarmCallbackError | None = None

    @classmethod
    def success(cls) -> DeliveryOutcome:
        return cls(ok=True)

    @classmethod
    def failure(cls, error: AlarmCallbackError) -> DeliveryOutcome:
        return cls(
            ok=False,
            kind=error.kind,
            status_code=getattr(error, "status_code", None),
            error=error,
        )

    @property
    def message(self) -> str:
        return "ok" if self.ok else str(self.error)


class AlarmCallback(Protocol):
    """
    告警回调接口：宿主在条件触发时调用，向某个渠道投递告警。

    v0 约定：
    - initialize/validate_configuration 失败抛 ConfigurationError，阻止启用
    - deliver 失败抛 AlarmCallbackError 子类，由调用方（宿主/runner）决定是否重试
    - 初始化之后不再修改内部状态，deliver 可并发调用
    """

    def initialize(self, config: Configuration | Mapping[str, Any]) -> None: ...

    def deliver(self, event: AlertEvent) -> None: ...

    def describe_required_configuration(self) -> ConfigurationRequest: ...

    def validate_configuration(self, config: Configuration | Mapping[str, Any]) -> None: ...

    def name(self) -> str: ...

    def current_attributes(self) -> dict[str, Any]: ...
