# src/accesslog/tests/test_logging/test_middleware_integration.py
import io
import json

import pytest
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.testclient import TestClient

from accesslog.api.error_handlers import register_exception_handlers
from accesslog.config.settings import LoggerConfig
from accesslog.core.logging.middleware import AccessLogMiddleware, set_app_id, set_request_error

FORMAT = (
    '{"method":"${method}","path":"${path}","status":${status},"level":"${level}",'
    '"error":${error},"app_id":"${app_id}","id":"${id}",'
    '"bytes_in":${bytes_in},"bytes_out":${bytes_out},'
    '"latency":${latency},"ua":"${user_agent}","ip":"${remote_ip}"}\n'
)

# body/response are raw text, so they get their own non-JSON line format
CAPTURE_FORMAT = "${status}|${body}|${response}\n"


class Login(BaseModel):
    username: str
    password: str


def build_app(sink: io.BytesIO, **config) -> FastAPI:
    app = FastAPI()
    app.add_middleware(
        AccessLogMiddleware,
        config=LoggerConfig(format=config.pop("format", FORMAT), output=sink, **config),
    )
    register_exception_handlers(app)

    @app.get("/x", status_code=201)
    def created():
        return {"ok": True}

    @app.get("/health")
    def health():
        return {"status": "up"}

    @app.post("/login")
    async def login(request: Request, payload: Login):
        raw = await request.body()
        set_app_id(request, "auth-service")
        return {"user": payload.username, "echo_len": len(raw)}

    @app.get("/soft-fail")
    def soft_fail(request: Request):
        set_request_error(request, {"reason": "quota exceeded"})
        return JSONResponse({"accepted": False}, status_code=200)

    @app.get("/missing")
    def missing():
        raise HTTPException(status_code=404, detail="Not here")

    @app.get("/crash")
    def crash():
        raise RuntimeError("boom")

    return app


def lines(sink: io.BytesIO) -> list[dict]:
    return [json.loads(line) for line in sink.getvalue().decode().splitlines()]


def test_get_request_is_logged():
    sink = io.BytesIO()
    client = TestClient(build_app(sink))
    resp = client.get("/x", headers={"User-Agent": "pytest-client", "X-Request-ID": "rid-1"})
    assert resp.status_code == 201

    [record] = lines(sink)
    assert record["method"] == "GET"
    assert record["path"] == "/x"
    assert record["status"] == 201
    assert record["level"] == "info"
    assert record["error"] is None
    assert record["id"] == "rid-1"
    assert record["bytes_out"] == len(resp.content)
    assert record["latency"] >= 0
    assert record["ua"] == "pytest-client"
    assert record["ip"] == "testclient"


def test_end_to_end_minimal_format():
    sink = io.BytesIO()
    client = TestClient(build_app(sink, format='{"status":${status},"method":"${method}"}\n'))
    client.get("/x")
    assert sink.getvalue() == b'{"status":201,"method":"GET"}\n'


def test_body_is_replayed_and_redacted(fake):
    sink = io.BytesIO()
    client = TestClient(build_app(sink))
    secret = fake.password(length=20, special_chars=False)
    payload = json.dumps({"username": "bob", "password": secret}, indent=2)
    resp = client.post("/login", content=payload, headers={"Content-Type": "application/json"})
    assert resp.status_code == 200
    assert resp.json() == {"user": "bob", "echo_len": len(payload)}

    [record] = lines(sink)
    assert record["app_id"] == "auth-service"
    assert record["bytes_in"] == len(payload)


def test_body_and_response_are_captured_and_redacted(fake):
    sink = io.BytesIO()
    client = TestClient(build_app(sink, format=CAPTURE_FORMAT))
    secret = fake.password(length=20, special_chars=False)
    payload = json.dumps({"username": "bob", "password": secret}, indent=2)
    resp = client.post("/login", content=payload, headers={"Content-Type": "application/json"})

    raw = sink.getvalue().decode()
    assert secret not in raw
    assert raw.count("\n") == 1
    status, body, response = raw.rstrip("\n").split("|")
    assert status == "200"
    assert body.startswith('{"username": "bob",')
    assert json.loads(response) == resp.json()


def test_skipped_path_writes_nothing():
    sink = io.BytesIO()
    client = TestClient(build_app(sink, skip={"/health"}))
    assert client.get("/health").status_code == 200
    assert sink.getvalue() == b""
    client.get("/x")
    assert len(lines(sink)) == 1


def test_attached_error_sets_level():
    sink = io.BytesIO()
    client = TestClient(build_app(sink))
    client.get("/soft-fail")
    [record] = lines(sink)
    assert record["status"] == 200
    assert record["level"] == "error"
    assert record["error"] == {"reason": "quota exceeded"}


def test_handled_http_exception_is_recorded():
    sink = io.BytesIO()
    client = TestClient(build_app(sink))
    resp = client.get("/missing")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Not here"}
    [record] = lines(sink)
    assert record["status"] == 404
    assert record["level"] == "error"
    assert record["error"] == "Not here"


def test_validation_error_is_recorded():
    sink = io.BytesIO()
    client = TestClient(build_app(sink))
    resp = client.post("/login", json={"username": "bob"})
    assert resp.status_code == 422
    [record] = lines(sink)
    assert record["level"] == "error"
    assert isinstance(record["error"], list)


def test_unhandled_exception_is_logged_and_reraised():
    sink = io.BytesIO()
    client = TestClient(build_app(sink))
    with pytest.raises(RuntimeError):
        client.get("/crash")
    [record] = lines(sink)
    assert record["status"] == 500
    assert record["level"] == "error"
    assert record["error"] == "boom"


def test_unhandled_exception_response_is_500():
    sink = io.BytesIO()
    client = TestClient(build_app(sink), raise_server_exceptions=False)
    assert client.get("/crash").status_code == 500
    assert lines(sink)[0]["status"] == 500


def test_logging_failure_never_breaks_the_request():
    class BrokenSink:
        def write(self, data):
            raise OSError("sink offline")

    app = FastAPI()
    app.add_middleware(AccessLogMiddleware, config=LoggerConfig(output=BrokenSink()))

    @app.get("/x")
    def ok():
        return {"ok": True}

    assert TestClient(app).get("/x").json() == {"ok": True}
