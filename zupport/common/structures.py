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

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Zupport Settings
    ----------------
    Process-wide settings, read from the environment (and from ./config/.env
    once `load_environment()` has run).

    Attributes:
        port (int): Listening port.
        host (str): Bind address.
        log_dir (Path): Root of the tailed log files. The agent's own
            error.log / combined.log are written there as well.
        editable_dir (Path): Root of the files exposed by the edit endpoints.
        log_level (str): Minimum severity persisted by the agent logger.
        console_logging (bool): Echo agent logs to the console.
        base_path (str): URL prefix under which every route is mounted.
        monitoring_config (Path | None): Optional YAML file describing the
            monitored queues and services.
    """

    port: int = Field(4111, validation_alias="PORT")
    host: str = Field("0.0.0.0", validation_alias="HOST")
    log_dir: Path = Field(Path("logs"), validation_alias="ZUPPORT_LOG_DIR")
    editable_dir: Path = Field(default_factory=Path.cwd, validation_alias="ZUPPORT_EDITABLE_DIR")
    log_level: str = Field("info", validation_alias="LOG_LEVEL")
    console_logging: bool = Field(True, validation_alias="CONSOLE_LOGGING")
    base_path: str = Field("/zupport", validation_alias="BASE_PATH")
    monitoring_config: Optional[Path] = Field(None, validation_alias="ZUPPORT_MONITORING_CONFIG")
    static_dir: Path = Field(Path("public"), validation_alias="ZUPPORT_STATIC_DIR")
    tail_poll_interval: float = Field(0.25, validation_alias="ZUPPORT_TAIL_POLL_INTERVAL")
    display_timezone: str = Field("America/New_York", validation_alias="ZUPPORT_DISPLAY_TIMEZONE")
    authorized_origins: List[str] = Field(default_factory=list, validation_alias="ZUPPORT_AUTHORIZED_ORIGINS")

    model_config = {
        "extra": "ignore",  # allows unrelated variables in .env or os.environ
        "populate_by_name": True,
    }

    @field_validator("base_path")
    @classmethod
    def _normalize_base_path(cls, value: str) -> str:
        value = value.strip()
        if not value or value == "/":
            return ""
        return "/" + value.strip("/")


# ---------------- Monitoring configuration (static, read-only after startup) ----------------


class QueueThresholds(BaseModel):
    files: List[int] = Field(..., min_length=3, max_length=3, description="Ascending file-count thresholds [tired, sick, dead].")
    minutes: List[int] = Field(default_factory=lambda: [0, 0, 0], min_length=3, max_length=3, description="Age thresholds in minutes, informational.")


class QueueWatch(BaseModel):
    path: str
    thresholds: QueueThresholds


class QueueCategory(BaseModel):
    """A file category counted in every monitored queue, matched by extension."""

    name: str
    extension: str


class ServiceConfig(BaseModel):
    name: str = Field(..., description="systemd unit name")
    version_cmd: Optional[str] = Field(None, description="Shell command printing the service version")
    artifacts_glob: Optional[str] = Field(None, description="Glob of deployed artifacts reported for the service")


class HttpServiceConfig(BaseModel):
    name: str
    url: str = Field(..., description="Endpoint answering JSON {success, version}")
    timeout: float = 2.0


def _default_queue(path: str, files: List[int], minutes: List[int]) -> QueueWatch:
    return QueueWatch(path=path, thresholds=QueueThresholds(files=files, minutes=minutes))


def default_queues() -> List[QueueWatch]:
    outgoing = [100, 500, 1000]
    errors = [2, 5, 10]
    queues = [_default_queue(f"/zpdata/agents/{agent}/outgoing", outgoing, [10, 15, 20]) for agent in ("zippi", "shipit", "faxit")]
    queues += [
        _default_queue(f"/zpdata/incoming/{name}", outgoing, [3, 6, 10])
        for name in ("outboundMessage", "captured", "outgoing", "routed", "sftp", "smtp", "venali", "zpaper")
    ]
    queues.append(_default_queue("/zpdata/agents/emailToFaxAgent/errors", errors, [1, 2, 3]))
    queues += [
        _default_queue(path, errors, [1, 3, 0])
        for path in (
            "/zpdata/agents/faxOutAgent/errors",
            "/zpdata/agents/outboundMessageAgent/errors",
            "/zpdata/agents/routeAgent/errors",
            "/zpdata/agents/routeAgentSFTP/errors",
            "/zpdata/incoming/sftp/errors",
            "/zpdata/logs/errors",
        )
    ]
    queues.append(_default_queue("/zpdata/cache", errors, [60, 0, 0]))
    queues.append(_default_queue("/zpdata/queues/S3/errors", [0, 0, 0], [1, 3, 5]))
    return queues


def default_services() -> List[ServiceConfig]:
    return [
        ServiceConfig(
            name="tomcat9",
            version_cmd="java -cp /usr/share/tomcat9/lib/catalina.jar org.apache.catalina.util.ServerInfo | grep 'Server version' | cut -d'/' -f2",
            artifacts_glob="/var/lib/tomcat9/webapps/*.war",
        ),
        ServiceConfig(name="nodered", version_cmd="node-red --version 2>/dev/null | grep -o 'v[0-9.]*' || echo unknown"),
    ]


class MonitoringConfig(BaseModel):
    queues: List[QueueWatch] = Field(default_factory=default_queues)
    queue_categories: List[QueueCategory] = Field(
        default_factory=lambda: [QueueCategory(name="xml", extension=".xml"), QueueCategory(name="pdf", extension=".pdf")],
        min_length=1,
    )
    services: List[ServiceConfig] = Field(default_factory=default_services)
    http_services: List[HttpServiceConfig] = Field(
        default_factory=lambda: [HttpServiceConfig(name="Sprkz", url="http://localhost:3010/api/v1/endpoint")]
    )
    top_processes: int = Field(5, ge=0)
    latest_os_release: str = Field("2023", description="Release tag considered current for the host OS")
    load_thresholds: List[float] = Field(default_factory=lambda: [2.8, 5.0, 8.0])
    thread_thresholds: List[int] = Field(default_factory=lambda: [30, 120, 300])
