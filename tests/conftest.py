import os
import socketserver
import sys
import threading
from datetime import UTC, datetime


PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")

if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

import pytest  # noqa: E402

from alarmhook.models import AlertCondition, AlertEvent, CheckResult, MessageSummary, Stream, StreamRule  # noqa: E402


class FakeResponse:
    """
    模拟 transport 返回的 response：记录是否被 close()。
    """

    def __init__(self, status: int) -> None:
        self.status = status
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeTransport:
    """
    模拟宿主注入的 HTTP transport。
    - error 不为空时 post 直接抛出该异常
    - 否则返回固定 status 的 FakeResponse，并记录每次请求
    """

    def __init__(self, *, status: int = 200, error: Exception | None = None) -> None:
        self.status = status
        self.error = error
        self.requests: list[dict] = []
        self.responses: list[FakeResponse] = []

    def post(self, url, *, body, headers):  # noqa: ANN001, ANN201
        self.requests.append({"url": url, "body": body, "headers": dict(headers)})
        if self.error is not None:
            raise self.error
        resp = FakeResponse(self.status)
        self.responses.append(resp)
        return resp


@pytest.fixture
def fake_transport_cls() -> type[FakeTransport]:
    return FakeTransport


@pytest.fixture
def alert_event() -> AlertEvent:
    t = datetime(2026, 2, 10, 0, 0, tzinfo=UTC)
    stream = Stream(
        id="5400deadbeefdeadbeef0001",
        title="nginx errors",
        description="5xx responses from the edge",
        matching_type="AND",
        rules=(StreamRule(id="r1", field="source", value="edge-01", type="exact"),),
        created_at=t,
        creator_user_id="admin",
    )
    condition = AlertCondition(
        id="c1",
        type="message_count",
        title="More than 10 errors in 5 minutes",
        parameters={"threshold": 10, "time": 5, "threshold_type": "more"},
        grace=1,
        backlog=1,
        created_at=t,
        creator_user_id="admin",
    )
    result = CheckResult(
        triggered=True,
        result_description="Stream had 12 messages in the last 5 minutes with trigger condition more than 10 messages.",
        triggered_condition=condition,
        triggered_at=t,
        matching_messages=(MessageSummary(index="graylog_0", message={"message": "GET / 502", "source": "edge-01"}),),
    )
    return AlertEvent(stream=stream, check_result=result)


class _GarbageStatusHandler(socketserver.StreamRequestHandler):
    """
    读完整个请求后回一行非法的 status line，模拟坏掉的 webhook 端点。
    """

    def handle(self) -> None:
        length = 0
        while True:
            line = self.rfile.readline()
            if line in (b"\r\n", b"\n", b""):
                break
            name, _, value = line.decode("latin-1").partition(":")
            if name.strip().lower() == "content-length":
                length = int(value.strip())
        if length:
            self.rfile.read(length)
        self.wfile.write(b"garbage\r\n\r\n")
        self.wfile.flush()


@pytest.fixture
def garbage_status_url():  # noqa: ANN201
    server = socketserver.ThreadingTCPServer(("127.0.0.1", 0), _GarbageStatusHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        host, port = server.server_address[:2]
        yield f"http://{host}:{port}/alerts"
    finally:
        server.shutdown()
        server.server_close()
