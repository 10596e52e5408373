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
import time
from datetime import datetime, timezone, tzinfo
from typing import Awaitable, TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from zupport.common.structures import MonitoringConfig
from zupport.features.status import collectors
from zupport.features.status.structures import (
    DiskInfo,
    MemoryInfo,
    QueueStatus,
    ServerStats,
    StatusSnapshot,
    SystemInfo,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StatusService:
    """
    Status Aggregator.

    Each call fans out to every collector concurrently and merges the results
    into one StatusSnapshot. A collector that fails is replaced by its default
    record, so the snapshot is always produced. Nothing is cached: each call
    reads live OS state.
    """

    def __init__(self, config: MonitoringConfig, started_at: float, display_timezone: str = "UTC"):
        self.config = config
        self.started_at = started_at
        self.tz = self._resolve_timezone(display_timezone)

    @staticmethod
    def _resolve_timezone(name: str) -> tzinfo:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown display timezone '{name}', falling back to UTC")
            return timezone.utc

    async def _guard(self, name: str, call: Awaitable[T], default: T) -> T:
        try:
            return await call
        except Exception as e:
            logger.warning(f"UpstreamFailure in {name} collector, using defaults: {e!r}")
            return default

    def now(self) -> str:
        return datetime.now(self.tz).isoformat(timespec="seconds")

    def uptime(self) -> float:
        return max(0.0, time.time() - self.started_at)

    async def snapshot(self) -> StatusSnapshot:
        system, memory, disk, queue_status, services, top = await asyncio.gather(
            self._guard("system", collectors.collect_system_info(self.config), SystemInfo()),
            self._guard("memory", collectors.collect_memory_info(), MemoryInfo()),
            self._guard("disk", collectors.collect_disk_info(), DiskInfo()),
            self._guard("queues", collectors.collect_queue_status(self.config), QueueStatus()),
            self._guard("services", collectors.collect_service_status(self.config), []),
            self._guard("processes", collectors.collect_top_processes(self.config.top_processes), []),
        )
        return StatusSnapshot(
            timestamp=self.now(),
            system=system,
            memory=memory,
            disk=disk,
            process=collectors.collect_process_info(self.started_at),
            queues=queue_status.queues,
            queue_totals=queue_status.totals,
            services=services,
            top_processes=top,
        )

    async def server_stats(self) -> ServerStats:
        """
        Lightweight metrics: agent process memory, agent uptime and root disk usage.
        Unlike snapshot(), a failing source fails the whole call.
        """
        disk = await collectors.collect_root_disk_usage()
        return ServerStats(memory=collectors.process_memory(), uptime=self.uptime(), disk=disk)
