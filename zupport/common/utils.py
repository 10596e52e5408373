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

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml

from zupport.common.structures import MonitoringConfig

logger = logging.getLogger(__name__)


def parse_monitoring_configuration(configuration_path: Optional[Path]) -> MonitoringConfig:
    """
    Parses the monitoring configuration (queues and services) from a YAML file.

    Args:
        configuration_path (Path | None): The path to the YAML file. When None,
            the built-in defaults are used.

    Returns:
        MonitoringConfig: The parsed configuration object.
    """
    if configuration_path is None:
        return MonitoringConfig()
    with open(configuration_path, "r") as f:
        config: Optional[Dict] = yaml.safe_load(f)
    logger.info(f"Loaded monitoring configuration from {configuration_path}")
    return MonitoringConfig(**(config or {}))


@dataclass
class ShellResult:
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_shell(command: str, timeout: Optional[float] = None) -> ShellResult:
    """
    Run a command through the host shell and capture its output as text.

    With `timeout=None` the call waits for the process however long it takes.
    On timeout the process is killed and `asyncio.TimeoutError` propagates.
    """
    proc = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise
    return ShellResult(
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
        returncode=proc.returncode if proc.returncode is not None else -1,
    )


def format_duration(seconds: Optional[float]) -> str:
    if seconds is None:
        return ""
    seconds = int(seconds)
    days, rem = divmod(seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60
    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_age(seconds: float) -> str:
    """Largest applicable unit: days, else hours, else minutes."""
    minutes = int(max(seconds, 0) // 60)
    hours = minutes // 60
    days = hours // 24
    if days > 0:
        return f"{days}d"
    if hours > 0:
        return f"{hours}h"
    return f"{minutes}m"
