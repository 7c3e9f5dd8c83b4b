from __future__ import annotations

import http.client
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..configuration import Configuration, ConfigurationRequest, TextField, as_configuration
from ..encoding import Encoder, JsonEncoder
from ..errors import (
    AlarmCallbackError,
    ConfigurationError,
    DeliveryError,
    MalformedUrlError,
    SerializationError,
    TransportError,
)
from ..http_utils import HttpTransport, is_valid_url
from ..models import AlertEvent, CheckResult, Stream
from .base import AlarmCallback, DeliveryOutcome
from .payload import build_event_payload


logger = logging.getLogger(__name__)

CK_URL = "url"
CONTENT_TYPE = "application/json"


@dataclass(slots=True)
class HttpAlarmCallback(AlarmCallback):
    """
    HTTP 告警回调：把 stream + check_result 编码为 JSON，POST 到用户配置的 URL。

    说明：
    - 每次 deliver 只尝试一次，不重试；失败以 AlarmCallbackError 子类抛给调用方
    - transport / encoder 由宿主注入；transport 负责超时与连接池
    - response 在所有路径上都会 close()
    """

    transport: HttpTransport
    encoder: Encoder = field(default_factory=JsonEncoder)
    _configuration: Configuration | None = field(default=None, init=False, repr=False)

    def name(self) -> str:
        return "HTTP Alarm Callback"

    def initialize(self, config: Configuration | Mapping[str, Any]) -> None:
        if self._configuration is not None:
            raise ConfigurationError(f"{self.name()} is already initialized")
        cfg = as_configuration(config)
        self.validate_configuration(cfg)
        self._configuration = cfg

    def describe_required_configuration(self) -> ConfigurationRequest:
        request = ConfigurationRequest()
        request.add_field(
            TextField(
                key=CK_URL,
                label="URL",
                default_hint="https://example.org/alerts",
                description="The URL to POST to when an alert is triggered",
                required=True,
            )
        )
        return request

    def validate_configuration(self, config: Configuration | Mapping[str, Any]) -> None:
        cfg = as_configuration(config)
        self.describe_required_configuration().check(cfg)
        if not is_valid_url(cfg.get_string(CK_URL)):
            raise ConfigurationError(f"Malformed URL: {cfg.get_string(CK_URL)!r}")

    def current_attributes(self) -> dict[str, Any]:
        if self._configuration is None:
            return {}
        return self._configuration.source()

    def call(self, stream: Stream, check_result: CheckResult) -> None:
        self.deliver(AlertEvent(stream=stream, check_result=check_result))

    def attempt(self, event: AlertEvent) -> DeliveryOutcome:
        try:
            self.deliver(event)
        except AlarmCallbackError as e:
            return DeliveryOutcome.failure(e)
        return DeliveryOutcome.success()

    def deliver(self, event: AlertEvent) -> None:
        if self._configuration is None:
            raise ConfigurationError(f"{self.name()} is not initialized")
        url = self._configuration.get_string(CK_URL) or ""

        try:
            body = self.encoder.encode(build_event_payload(event))
        except SerializationError:
            raise
        except (TypeError, ValueError) as e:
            raise SerializationError("Unable to serialize alarm") from e

        try:
            response = self.transport.post(url, body=body, headers={"Content-Type": CONTENT_TYPE})
        except TransportError:
            raise
        except ValueError as e:
            raise MalformedUrlError(f"Malformed URL: {e}") from e
        except OSError as e:
            raise TransportError(str(e) or type(e).__name__) from e
        except http.client.HTTPException as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

        try:
            status = int(response.status)
        finally:
            response.close()

        if not 200 <= status <= 299:
            raise DeliveryError(status)

        logger.debug(
            "alert delivered: callback=%s stream_id=%s status=%d bytes=%d",
            self.name(),
            event.stream.id,
            status,
            len(body),
        )
