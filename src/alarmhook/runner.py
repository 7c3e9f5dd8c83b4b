from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime

from .callbacks import AlarmCallback, DeliveryOutcome, create_callback
from .configuration import AppConfig
from .errors import AlarmCallbackError, ConfigurationError
from .http_utils import HttpTransport, UrllibTransport
from .models import AlertEvent, utc_now


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ActiveCallback:
    title: str
    callback: AlarmCallback


@dataclass(frozen=True, slots=True)
class CallbackDispatchResult:
    title: str
    callback_name: str
    outcome: DeliveryOutcome
    duration_ms: int


@dataclass(frozen=True, slots=True)
class DispatchReport:
    started_at: datetime
    finished_at: datetime
    duration_ms: int
    results: tuple[CallbackDispatchResult, ...]
    attempts: int
    successes: int
    failures: int


@dataclass(slots=True)
class CallbackRunner:
    """
    宿主侧的最小投递器：把一条告警依次交给每个已启用的 callback。

    v0 约定：
    - 每个 callback 只尝试一次，失败记录日志后继续下一个
    - 不重试、不持久化；是否重试由外层调度决定
    """

    callbacks: tuple[ActiveCallback, ...]

    def dispatch(self, event: AlertEvent) -> DispatchReport:
        started_at = utc_now()
        start_t = time.monotonic()

        results: list[CallbackDispatchResult] = []
        successes = 0
        failures = 0
        for active in self.callbacks:
            cb_start_t = time.monotonic()
            callback_name = active.callback.name()
            try:
                active.callback.deliver(event)
                outcome = DeliveryOutcome.success()
                successes += 1
            except AlarmCallbackError as e:
                outcome = DeliveryOutcome.failure(e)
                failures += 1
                logger.exception(
                    "deliver failed: callback=%s title=%s kind=%s status=%s stream_id=%s",
                    callback_name,
                    active.title,
                    outcome.kind.value if outcome.kind else "-",
                    outcome.status_code if outcome.status_code is not None else "-",
                    event.stream.id,
                )
            results.append(
                CallbackDispatchResult(
                    title=active.title,
                    callback_name=callback_name,
                    outcome=outcome,
                    duration_ms=int((time.monotonic() - cb_start_t) * 1000),
                )
            )

        return DispatchReport(
            started_at=started_at,
            finished_at=utc_now(),
            duration_ms=int((time.monotonic() - start_t) * 1000),
            results=tuple(results),
            attempts=len(results),
            successes=successes,
            failures=failures,
        )


def build_runner(config: AppConfig, transport: HttpTransport | None = None) -> CallbackRunner:
    """
    根据配置构建 CallbackRunner。

    设计取舍（v0）：
    - 统一在这里做“配置 -> 实例”的装配，所有 callback 共享同一个 transport
    - 任一 callback 配置非法都直接抛 ConfigurationError，不做部分启用
    """
    if transport is None:
        transport = UrllibTransport(
            timeout_seconds=config.http.timeout_seconds,
            user_agent=config.http.user_agent,
            verify_ssl=config.http.verify_ssl,
        )

    callbacks: list[ActiveCallback] = []
    for cb_cfg in config.callbacks:
        callback = create_callback(cb_cfg.type, transport=transport)
        try:
            callback.initialize(cb_cfg.resolve_configuration())
        except ConfigurationError as e:
            raise ConfigurationError(f"callback {cb_cfg.title!r}: {e}") from e
        callbacks.append(ActiveCallback(title=cb_cfg.title, callback=callback))

    return CallbackRunner(callbacks=tuple(callbacks))
