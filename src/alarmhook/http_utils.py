from __future__ import annotations

import http.client
import ssl
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Mapping, Protocol

from .errors import TransportError


_ALLOWED_SCHEMES = ("http", "https")


class HttpResponse(Protocol):
    """
    transport 返回的响应：callback 只关心状态码，并负责在任何路径上 close()。
    """

    @property
    def status(self) -> int: ...

    def close(self) -> None: ...


class HttpTransport(Protocol):
    """
    宿主提供的共享 HTTP 客户端。

    v0 约定：
    - 完成了一次 HTTP 交换（无论状态码）就返回 response，不对非 2xx 抛异常
    - 连接失败/超时抛 OSError（或其子类）或 TransportError，URL 无法使用时抛 ValueError
    - 超时、连接池由 transport 自己负责，调用方不做取消
    """

    def post(self, url: str, *, body: bytes, headers: Mapping[str, str]) -> HttpResponse: ...


class _UrllibResponse:
    def __init__(self, raw: Any, status: int) -> None:
        self._raw = raw
        self._status = status

    @property
    def status(self) -> int:
        return self._status

    def read(self) -> bytes:
        return self._raw.read()

    def close(self) -> None:
        self._raw.close()


class UrllibTransport:
    """
    轻量 HTTP transport（仅依赖标准库），单次请求、不重试。

    urllib 会把 4xx/5xx 作为 HTTPError 抛出；HTTPError 本身就是一个完整响应，
    这里把它还原成普通 response 交给调用方判断状态码。
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 20.0,
        user_agent: str = "alarmhook/0",
        verify_ssl: bool = True,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent
        self._ssl_context = ssl.create_default_context() if verify_ssl else ssl._create_unverified_context()

    def post(self, url: str, *, body: bytes, headers: Mapping[str, str]) -> _UrllibResponse:
        request_headers = {"User-Agent": self._user_agent}
        request_headers.update(dict(headers))

        req = urllib.request.Request(url=url, data=body, headers=request_headers, method="POST")
        try:
            resp = urllib.request.urlopen(req, timeout=self._timeout_seconds, context=self._ssl_context)  # noqa: S310
        except urllib.error.HTTPError as e:
            return _UrllibResponse(e, e.code)
        except http.client.HTTPException as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e
        return _UrllibResponse(resp, getattr(resp, "status", 200))


def is_valid_url(value: str | None) -> bool:
    """
    判断是否为可用于 POST 的绝对 URL：scheme 为 http/https，且包含 host；
    端口（若有）必须是合法数字。
    """
    if not value or not value.strip():
        return False
    try:
        parsed = urllib.parse.urlsplit(value.strip())
        parsed.port  # noqa: B018
    except ValueError:
        return False
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES:
        return False
    return bool(parsed.hostname)
