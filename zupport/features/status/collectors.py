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

"""
Metric collectors.

Every collector is an independent coroutine returning one sub-record of the
status snapshot. A collector raises when its primary source is unavailable;
the aggregator (StatusService) turns that into the record's default value.
Secondary sources (os-release, /proc/meminfo, df) degrade inside the
collector so the rest of the record survives.
"""

import asyncio
import glob
import logging
import os
import platform
import socket
import sys
import time
from pathlib import Path
from typing import List, Optional

import aiofiles
import httpx
import psutil
from anyio import to_thread

from zupport.common.errors import UpstreamFailure
from zupport.common.structures import HttpServiceConfig, MonitoringConfig, ServiceConfig
from zupport.common.utils import run_shell
from zupport.features.status.parsers import (
    parse_df,
    parse_main_pid,
    parse_meminfo,
    parse_os_release,
    parse_ps,
    parse_version_probe,
)
from zupport.features.status.queues import scan_queues
from zupport.features.status.structures import (
    AgentProcessInfo,
    DiskInfo,
    MemoryDetails,
    MemoryInfo,
    OsDetails,
    ProcessMemory,
    ProcessRecord,
    QueueStatus,
    ServiceRecord,
    SystemInfo,
    SystemThresholds,
)

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = "/etc/os-release"
MEMINFO_PATH = "/proc/meminfo"
COMMAND_TIMEOUT = 10.0  # seconds, per introspection command


async def _read_text(path: str) -> str:
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        return await f.read()


async def _shell_stdout(command: str, source: str) -> str:
    try:
        result = await run_shell(command, timeout=COMMAND_TIMEOUT)
    except (OSError, asyncio.TimeoutError) as e:
        raise UpstreamFailure(source, f"'{command}' could not run: {e!r}") from e
    if not result.ok:
        raise UpstreamFailure(source, f"'{command}' exited with {result.returncode}", details=result.stderr.strip())
    return result.stdout


# ---------------- System ----------------


async def collect_os_details(latest_release: str) -> OsDetails:
    try:
        return parse_os_release(await _read_text(OS_RELEASE_PATH), latest_release)
    except OSError as e:
        logger.debug(f"{OS_RELEASE_PATH} unavailable: {e}")
        return OsDetails()


async def collect_system_info(config: MonitoringConfig) -> SystemInfo:
    boot_time = await to_thread.run_sync(psutil.boot_time)
    return SystemInfo(
        hostname=socket.gethostname(),
        platform=sys.platform,
        arch=platform.machine(),
        os=await collect_os_details(config.latest_os_release),
        cpus=os.cpu_count() or 0,
        uptime=max(0.0, time.time() - boot_time),
        loadavg=list(os.getloadavg()),
        thresholds=SystemThresholds(load=config.load_thresholds, threads=config.thread_thresholds),
    )


# ---------------- Memory ----------------


def process_memory() -> ProcessMemory:
    info = psutil.Process().memory_info()
    return ProcessMemory(rss=info.rss, vms=info.vms)


async def collect_memory_info() -> MemoryInfo:
    vm = await to_thread.run_sync(psutil.virtual_memory)
    try:
        details = parse_meminfo(await _read_text(MEMINFO_PATH))
    except OSError as e:
        logger.debug(f"{MEMINFO_PATH} unavailable: {e}")
        details = MemoryDetails()
    return MemoryInfo(
        total=vm.total,
        free=vm.available,
        used=vm.total - vm.available,
        process=process_memory(),
        details=details,
    )


# ---------------- Disk ----------------


async def collect_root_disk_usage() -> DiskInfo:
    usage = await to_thread.run_sync(psutil.disk_usage, "/")
    return DiskInfo(total=usage.total, free=usage.free, used=usage.total - usage.free)


async def collect_disk_info() -> DiskInfo:
    disk = await collect_root_disk_usage()
    try:
        disk.filesystems = parse_df(await _shell_stdout("df -h", "disk"))
    except UpstreamFailure as e:
        logger.warning(f"Per-mount disk details unavailable: {e}")
    return disk


# ---------------- Queues ----------------


async def collect_queue_status(config: MonitoringConfig) -> QueueStatus:
    return await to_thread.run_sync(scan_queues, config.queues, config.queue_categories)


# ---------------- Services ----------------


def _sample_process(pid: int) -> dict:
    """CPU% over a short interval, RSS, threads and uptime of one process. Blocking."""
    proc = psutil.Process(pid)
    cpu = proc.cpu_percent(interval=0.1)
    with proc.oneshot():
        return {
            "cpu": cpu,
            "memory": proc.memory_info().rss,
            "threads": proc.num_threads(),
            "uptime": int(time.time() - proc.create_time()),
        }


async def collect_systemd_service(service: ServiceConfig) -> ServiceRecord:
    record = ServiceRecord(name=service.name)
    try:
        state = await run_shell(f"systemctl is-active {service.name}", timeout=COMMAND_TIMEOUT)
    except (OSError, asyncio.TimeoutError) as e:
        logger.debug(f"systemctl unavailable for {service.name}: {e!r}")
        return record
    record.status = "active" if state.stdout.strip() == "active" else "inactive"

    if service.version_cmd:
        try:
            record.version = (await _shell_stdout(service.version_cmd, service.name)).strip() or "unknown"
        except UpstreamFailure as e:
            logger.debug(f"Version of {service.name} unavailable: {e}")

    if record.status != "active":
        return record

    try:
        pid = parse_main_pid(await _shell_stdout(f"systemctl show -p MainPID --value {service.name}", service.name))
        if pid is not None:
            stats = await to_thread.run_sync(_sample_process, pid)
            record.cpu = stats["cpu"]
            record.memory = stats["memory"]
            record.threads = stats["threads"]
            record.uptime = stats["uptime"]
    except (UpstreamFailure, psutil.Error) as e:
        logger.warning(f"Process statistics of {service.name} unavailable: {e}")

    if service.artifacts_glob:
        record.artifacts = sorted(Path(p).name for p in glob.glob(service.artifacts_glob))
    return record


async def collect_http_service(service: HttpServiceConfig, client: httpx.AsyncClient) -> ServiceRecord:
    record = ServiceRecord(name=service.name, version=None)
    try:
        response = await client.get(service.url, timeout=service.timeout)
    except httpx.HTTPError as e:
        logger.debug(f"{service.name} probe failed: {e!r}")
        return record
    version: Optional[str] = parse_version_probe(response.text)
    if version is not None:
        record.status = "active"
        record.version = version
    return record


async def collect_service_status(config: MonitoringConfig) -> List[ServiceRecord]:
    async with httpx.AsyncClient() as client:
        results = await asyncio.gather(
            *(collect_systemd_service(s) for s in config.services),
            *(collect_http_service(s, client) for s in config.http_services),
        )
    return list(results)


# ---------------- Processes ----------------


async def collect_top_processes(count: int) -> List[ProcessRecord]:
    if count <= 0:
        return []
    output = await _shell_stdout("ps -eo pid,ppid,%cpu,%mem,comm --sort=-%cpu", "processes")
    return parse_ps(output)[:count]


def collect_process_info(started_at: float) -> AgentProcessInfo:
    return AgentProcessInfo(pid=os.getpid(), version=platform.python_version(), uptime=max(0.0, time.time() - started_at))
