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

from zupport.common.structures import MonitoringConfig, Settings
from zupport.common.utils import format_age, format_duration, parse_monitoring_configuration, run_shell


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0m"), (59, "0m"), (61, "1m"), (3 * 3600 + 5 * 60, "3h 5m"), (2 * 86400 + 7 * 3600, "2d 7h"), (None, "")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


@pytest.mark.parametrize("seconds,expected", [(-5, "0m"), (90, "1m"), (7200, "2h"), (90000, "1d")])
def test_format_age(seconds, expected):
    assert format_age(seconds) == expected


def test_monitoring_defaults_without_file():
    config = parse_monitoring_configuration(None)
    assert len(config.queues) == 20
    assert [c.name for c in config.queue_categories] == ["xml", "pdf"]
    assert [s.name for s in config.services] == ["tomcat9", "nodered"]
    assert [s.name for s in config.http_services] == ["Sprkz"]


def test_monitoring_file_overrides_sections(monitoring_file, queue_dir):
    config = parse_monitoring_configuration(monitoring_file)
    assert isinstance(config, MonitoringConfig)
    assert [q.path for q in config.queues] == [str(queue_dir)]
    assert config.queues[0].thresholds.files == [2, 4, 6]
    assert config.services == []
    assert config.top_processes == 3
    # untouched sections keep their defaults
    assert [(c.name, c.extension) for c in config.queue_categories] == [("xml", ".xml"), ("pdf", ".pdf")]


@pytest.mark.parametrize("raw,expected", [("/zupport", "/zupport"), ("zupport/", "/zupport"), ("/", ""), ("", "")])
def test_base_path_normalization(raw, expected):
    assert Settings(base_path=raw).base_path == expected


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("PORT", "5000")
    monkeypatch.setenv("ZUPPORT_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("CONSOLE_LOGGING", "false")
    settings = Settings()
    assert settings.port == 5000
    assert settings.log_dir == tmp_path
    assert settings.console_logging is False


@pytest.mark.asyncio
async def test_run_shell_captures_both_streams():
    result = await run_shell("echo out; echo err >&2; exit 2")
    assert result.stdout == "out\n"
    assert result.stderr == "err\n"
    assert result.returncode == 2
    assert not result.ok
