from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from .errors import ConfigurationError


def _require_dict(value: Any, *, where: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"Expected object at {where}, got {type(value)}")
    return value


_TRUE_STRINGS = ("1", "true", "yes", "on")
_FALSE_STRINGS = ("0", "false", "no", "off", "")


def _get_bool(d: Mapping[str, Any], key: str, default: bool) -> bool:
    v = d.get(key, default)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in _TRUE_STRINGS:
            return True
        if s in _FALSE_STRINGS:
            return False
        return default
    return bool(v)


def _get_int(d: Mapping[str, Any], key: str, default: int) -> int:
    v = d.get(key, default)
    if isinstance(v, bool):
        return default
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def _get_float(d: Mapping[str, Any], key: str, default: float) -> float:
    v = d.get(key, default)
    if isinstance(v, bool):
        return default
    try:
        return float(v)
    except (TypeError, ValueError):
        return default


def _get_str(d: Mapping[str, Any], key: str, default: str | None = None) -> str | None:
    v = d.get(key, default)
    if v is None:
        return None
    return str(v)


class Configuration(Mapping[str, Any]):
    """
    宿主提供的 callback 配置（只读）。

    构造时复制一份 source，之后对外只暴露只读视图，
    因此宿主后续修改原 dict 不会影响已初始化的 callback。
    """

    __slots__ = ("_source",)

    def __init__(self, source: Mapping[str, Any] | None = None) -> None:
        self._source = MappingProxyType(dict(source or {}))

    def __getitem__(self, key: str) -> Any:
        return self._source[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._source)

    def __len__(self) -> int:
        return len(self._source)

    def __repr__(self) -> str:
        return f"Configuration({dict(self._source)!r})"

    def get_string(self, key: str, default: str | None = None) -> str | None:
        return _get_str(self._source, key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        return _get_bool(self._source, key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        return _get_int(self._source, key, default)

    def source(self) -> dict[str, Any]:
        return dict(self._source)


def as_configuration(value: Configuration | Mapping[str, Any] | None) -> Configuration:
    if isinstance(value, Configuration):
        return value
    if value is not None and not isinstance(value, Mapping):
        raise ConfigurationError(f"Expected a configuration mapping, got {type(value).__name__}")
    return Configuration(value)


@dataclass(frozen=True, slots=True)
class TextField:
    """
    宿主 UI 需要收集的单个文本配置项。

    default_hint 只是 placeholder 示例，不会作为默认值写入配置。
    """

    key: str
    label: str
    default_hint: str
    description: str
    required: bool = True

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "default_hint": self.default_hint,
            "description": self.description,
            "required": self.required,
        }


@dataclass(slots=True)
class ConfigurationRequest:
    _fields: dict[str, TextField] = field(default_factory=dict)

    def add_field(self, text_field: TextField) -> None:
        self._fields[text_field.key] = text_field

    def get_field(self, key: str) -> TextField | None:
        return self._fields.get(key)

    def fields(self) -> tuple[TextField, ...]:
        return tuple(self._fields.values())

    def check(self, config: Mapping[str, Any]) -> None:
        for f in self._fields.values():
            if not f.required:
                continue
            value = config.get(f.key)
            if value is None or not str(value).strip():
                raise ConfigurationError(f"{f.label} parameter is missing!")

    def to_json_dict(self) -> dict[str, Any]:
        return {f.key: f.to_json_dict() for f in self._fields.values()}


@dataclass(frozen=True, slots=True)
class HttpTransportConfig:
    timeout_seconds: float = 20.0
    user_agent: str = "alarmhook/0"
    verify_ssl: bool = True


@dataclass(frozen=True, slots=True)
class CallbackConfig:
    """
    单个 callback 的配置条目。

    configuration_env:
      - 配置项 -> 环境变量名；环境变量存在时覆盖 configuration 中的字面值
        （webhook URL 常带 token，推荐通过环境变量注入，避免落盘）
    """

    type: str
    title: str
    configuration: Mapping[str, Any]
    configuration_env: Mapping[str, str] = field(default_factory=dict)

    def resolve_configuration(self) -> Configuration:
        values = dict(self.configuration)
        for key, env_name in self.configuration_env.items():
            env_value = os.environ.get(env_name)
            if env_value:
                values[key] = env_value
        return Configuration(values)


@dataclass(frozen=True, slots=True)
class AppConfig:
    http: HttpTransportConfig
    callbacks: tuple[CallbackConfig, ...]


def load_config(config_path: str) -> AppConfig:
    """
    v0 约定：使用 JSON 作为配置落地形式，避免引入第三方 YAML 解析依赖。

    JSON 顶层结构（示意）：
    {
      "http": { "timeout_seconds": 20, "verify_ssl": true },
      "callbacks": [
        { "type": "http", "title": "ops", "configuration": { "url": "https://..." },
          "configuration_env": { "url": "OPS_ALERT_URL" } }
      ]
    }
    """
    with open(config_path, "rb") as f:
        raw = json.loads(f.read().decode("utf-8"))

    root = _require_dict(raw, where="$")

    http = _require_dict(root.get("http", {}), where="$.http")
    http_cfg = HttpTransportConfig(
        timeout_seconds=_get_float(http, "timeout_seconds", 20.0),
        user_agent=str(http.get("user_agent") or "alarmhook/0"),
        verify_ssl=_get_bool(http, "verify_ssl", True),
    )

    raw_callbacks = root.get("callbacks", [])
    if not isinstance(raw_callbacks, list):
        raise ValueError(f"Expected array at $.callbacks, got {type(raw_callbacks)}")

    callbacks: list[CallbackConfig] = []
    for i, item in enumerate(raw_callbacks):
        where = f"$.callbacks[{i}]"
        cb = _require_dict(item, where=where)
        cb_type = str(cb.get("type") or "http")
        configuration = _require_dict(cb.get("configuration", {}), where=f"{where}.configuration")
        configuration_env = _require_dict(cb.get("configuration_env", {}), where=f"{where}.configuration_env")
        callbacks.append(
            CallbackConfig(
                type=cb_type,
                title=str(cb.get("title") or f"{cb_type}-{i}"),
                configuration=dict(configuration),
                configuration_env={str(k): str(v) for k, v in configuration_env.items()},
            )
        )

    return AppConfig(http=http_cfg, callbacks=tuple(callbacks))
