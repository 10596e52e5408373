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

import pytest
from fastapi.testclient import TestClient

from zupport.common.structures import (
    MonitoringConfig,
    QueueThresholds,
    QueueWatch,
    Settings,
)
from zupport.main import create_app

BASE_URL = "/zupport"


@pytest.fixture
def queue_dir(tmp_path):
    path = tmp_path / "queues" / "incoming"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def monitoring_file(tmp_path, queue_dir):
    """Monitoring YAML over one temp queue and no services, so nothing probes the host."""
    path = tmp_path / "monitoring.yaml"
    path.write_text(
        "queues:\n"
        f"  - path: {queue_dir}\n"
        "    thresholds:\n"
        "      files: [2, 4, 6]\n"
        "      minutes: [1, 2, 3]\n"
        "services: []\n"
        "http_services: []\n"
        "top_processes: 3\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def settings(tmp_path, monitoring_file) -> Settings:
    log_dir = tmp_path / "logs"
    editable_dir = tmp_path / "editable"
    log_dir.mkdir()
    editable_dir.mkdir()
    return Settings(
        port=4111,
        host="127.0.0.1",
        log_dir=log_dir,
        editable_dir=editable_dir,
        log_level="debug",
        console_logging=False,
        base_path=BASE_URL,
        monitoring_config=monitoring_file,
        static_dir=tmp_path / "public",
        tail_poll_interval=0.05,
        display_timezone="UTC",
    )


@pytest.fixture
def client_fixture(settings):
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def monitoring_config(queue_dir) -> MonitoringConfig:
    return MonitoringConfig(
        queues=[QueueWatch(path=str(queue_dir), thresholds=QueueThresholds(files=[2, 4, 6], minutes=[1, 2, 3]))],
        services=[],
        http_services=[],
        top_processes=3,
    )
