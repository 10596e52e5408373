# Copyright Thales 2025
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import time

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from tests.conftest import BASE_URL


def _append(path, text):
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)


def _wait_until(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


class TestLogTailWebSocket:
    @pytest.fixture
    def app_log(self, settings):
        path = settings.log_dir / "app.log"
        path.write_text("existing line, not streamed\n", encoding="utf-8")
        return path

    def test_streams_only_appended_lines(self, client_fixture: TestClient, app_log):
        with client_fixture.websocket_connect(f"{BASE_URL}/ws?log=app.log") as ws:
            _append(app_log, "hello\n")
            message = ws.receive_json()
        assert message["message"] == "hello"
        assert message["level"] == "ALL"
        assert "timestamp" in message

    def test_level_filter_forwards_matching_lines_only(self, client_fixture: TestClient, app_log):
        with client_fixture.websocket_connect(f"{BASE_URL}/ws?log=app.log&level=error") as ws:
            _append(app_log, "INFO a\nERROR b\nINFO c\n")
            first = ws.receive_json()
            _append(app_log, "ERROR end\n")
            second = ws.receive_json()
        assert first["message"] == "ERROR b"
        assert first["level"] == "ERROR"
        assert second["message"] == "ERROR end"

    def test_missing_log_parameter_closes_connection(self, client_fixture: TestClient):
        with pytest.raises(WebSocketDisconnect) as exc:
            with client_fixture.websocket_connect(f"{BASE_URL}/ws"):
                pass
        assert exc.value.code == 1008

    def test_missing_log_file_closes_connection(self, client_fixture: TestClient):
        with pytest.raises(WebSocketDisconnect) as exc:
            with client_fixture.websocket_connect(f"{BASE_URL}/ws?log=absent.log"):
                pass
        assert exc.value.code == 1008
        assert len(client_fixture.app.state.context.log_tail.registry) == 0

    def test_closed_sessions_release_their_watch(self, client_fixture: TestClient, app_log):
        registry = client_fixture.app.state.context.log_tail.registry
        for _ in range(5):
            with client_fixture.websocket_connect(f"{BASE_URL}/ws?log=app.log") as ws:
                _append(app_log, "ping\n")
                assert ws.receive_json()["message"] == "ping"
        assert _wait_until(lambda: len(registry) == 0)

    def test_concurrent_sessions_have_independent_watches(self, client_fixture: TestClient, app_log):
        registry = client_fixture.app.state.context.log_tail.registry
        with client_fixture.websocket_connect(f"{BASE_URL}/ws?log=app.log") as first:
            with client_fixture.websocket_connect(f"{BASE_URL}/ws?log=app.log") as second:
                assert len(registry) == 2
                _append(app_log, "both\n")
                assert first.receive_json()["message"] == "both"
                assert second.receive_json()["message"] == "both"
        assert _wait_until(lambda: len(registry) == 0)


class TestLogsEndpoints:
    def test_list_logs(self, client_fixture: TestClient, settings):
        (settings.log_dir / "catalina.out").write_text("", encoding="utf-8")
        resp = client_fixture.get(f"{BASE_URL}/logs")
        assert resp.status_code == status.HTTP_200_OK
        logs = resp.json()["logs"]
        assert "catalina.out" in logs
        # the agent's own log files live in the same directory
        assert "combined.log" in logs

    def test_generator_start_stop(self, client_fixture: TestClient, settings):
        url = f"{BASE_URL}/logs/generate"
        assert client_fixture.post(url, json={"action": "start"}).json() == {"status": "started"}
        assert client_fixture.post(url, json={"action": "start"}).json() == {"status": "no change"}

        generated = settings.log_dir / "not-catalina.out"
        assert _wait_until(lambda: generated.exists() and generated.stat().st_size > 0)

        assert client_fixture.post(url, json={"action": "stop"}).json() == {"status": "stopped"}
        assert client_fixture.post(url, json={"action": "stop"}).json() == {"status": "no change"}

    def test_generator_rejects_unknown_action(self, client_fixture: TestClient):
        resp = client_fixture.post(f"{BASE_URL}/logs/generate", json={"action": "restart"})
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.json()["error"] == "Invalid request"
