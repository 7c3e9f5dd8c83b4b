from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Mapping


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True, slots=True)
class StreamRule:
    id: str
    field: str
    value: str
    type: str
    inverted: bool = False

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "field": self.field,
            "value": self.value,
            "type": self.type,
            "inverted": self.inverted,
        }


@dataclass(frozen=True, slots=True)
class Stream:
    """
    被监控的数据流（告警的来源实体）。

    matching_type:
      - AND：所有 rule 命中才路由到该 stream
      - OR：任一 rule 命中即可
    """

    id: str
    title: str
    description: str = ""
    disabled: bool = False
    matching_type: str = "AND"
    rules: tuple[StreamRule, ...] = ()
    created_at: datetime | None = None
    creator_user_id: str | None = None

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "disabled": self.disabled,
            "matching_type": self.matching_type,
            "rules": [r.to_json_dict() for r in self.rules],
            "created_at": _iso(self.created_at),
            "creator_user_id": self.creator_user_id,
        }


@dataclass(frozen=True, slots=True)
class AlertCondition:
    """
    告警条件元数据（由宿主评估，这里只做只读描述）。

    grace:
      - 触发后的静默分钟数
    backlog:
      - 随告警附带的匹配消息条数
    """

    id: str
    type: str
    title: str
    parameters: Mapping[str, Any] = field(default_factory=dict)
    grace: int = 0
    backlog: int = 0
    created_at: datetime | None = None
    creator_user_id: str | None = None

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "parameters": dict(self.parameters),
            "grace": self.grace,
            "backlog": self.backlog,
            "created_at": _iso(self.created_at),
            "creator_user_id": self.creator_user_id,
        }


@dataclass(frozen=True, slots=True)
class MessageSummary:
    index: str
    message: Mapping[str, Any]

    def to_json_dict(self) -> dict[str, Any]:
        return {"index": self.index, "message": dict(self.message)}


@dataclass(frozen=True, slots=True)
class CheckResult:
    """
    条件评估结果。triggered 为 False 时 triggered_condition/triggered_at 通常为空。
    """

    triggered: bool
    result_description: str
    triggered_condition: AlertCondition | None = None
    triggered_at: datetime | None = None
    matching_messages: tuple[MessageSummary, ...] = ()

    def to_json_dict(self) -> dict[str, Any]:
        condition = self.triggered_condition
        return {
            "triggered": self.triggered,
            "result_description": self.result_description,
            "triggered_condition": condition.to_json_dict() if condition else None,
            "triggered_at": _iso(self.triggered_at),
            "matching_messages": [m.to_json_dict() for m in self.matching_messages],
        }


@dataclass(frozen=True, slots=True)
class AlertEvent:
    """
    一次告警投递的输入：来源 stream + 评估结果。按调用构造，callback 不保留。
    """

    stream: Stream
    check_result: CheckResult


def build_test_event(now: datetime | None = None) -> AlertEvent:
    """
    构造一条用于“发送测试告警”的合成事件（CLI --test 使用）。
    """
    t = now or utc_now()
    stream = Stream(
        id="000000000000000000000001",
        title="Test stream",
        description="Synthetic stream used to test alarm callbacks",
        created_at=t,
    )
    condition = AlertCondition(
        id="00000000-0000-0000-0000-000000000000",
        type="dummy",
        title="Test Alert",
        created_at=t,
    )
    result = CheckResult(
        triggered=True,
        result_description="Dummy alert to test notifications",
        triggered_condition=condition,
        triggered_at=t,
    )
    return AlertEvent(stream=stream, check_result=result)
