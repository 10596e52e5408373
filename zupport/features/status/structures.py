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

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from zupport.common.structures import QueueThresholds


class QueueHealth(str, Enum):
    HEALTHY = "healthy"
    TIRED = "tired"
    SICK = "sick"
    DEAD = "dead"
    UNKNOWN = "unknown"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    QueueHealth.HEALTHY: 0,
    QueueHealth.TIRED: 1,
    QueueHealth.SICK: 2,
    QueueHealth.DEAD: 3,
    QueueHealth.UNKNOWN: -1,
}


# ---------------- System ----------------


class OsDetails(BaseModel):
    name: str = "Unknown"
    version: str = "Unknown"
    status: str = Field("unknown", description="current | outdated | unknown")


class SystemThresholds(BaseModel):
    load: List[float] = Field(default_factory=list)
    threads: List[int] = Field(default_factory=list)


class SystemInfo(BaseModel):
    hostname: str = "unknown"
    platform: str = "unknown"
    arch: str = "unknown"
    os: OsDetails = Field(default_factory=OsDetails)
    cpus: int = 0
    uptime: float = 0.0
    loadavg: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0])
    thresholds: SystemThresholds = Field(default_factory=SystemThresholds)


# ---------------- Memory ----------------


class ProcessMemory(BaseModel):
    rss: int = 0
    vms: int = 0


class MemoryDetails(BaseModel):
    mem_free_kb: int = 0
    swap_free_kb: int = 0


class MemoryInfo(BaseModel):
    total: int = 0
    free: int = 0
    used: int = 0
    process: ProcessMemory = Field(default_factory=ProcessMemory)
    details: MemoryDetails = Field(default_factory=MemoryDetails)

    @property
    def used_percent(self) -> float:
        return (self.used / self.total * 100) if self.total else 0.0


# ---------------- Disk ----------------


class MountRecord(BaseModel):
    filesystem: str = Field(..., description="Device, or a display name for network mounts")
    size: str
    used: str
    available: str
    capacity: str = Field(..., description="Use% as printed by df, e.g. '42%'")
    mountpoint: str
    is_network: bool = False

    @property
    def capacity_percent(self) -> int:
        try:
            return int(self.capacity.rstrip("%"))
        except ValueError:
            return 0


class DiskInfo(BaseModel):
    total: int = 0
    free: int = 0
    used: int = 0
    filesystems: List[MountRecord] = Field(default_factory=list)


# ---------------- Queues ----------------


class OldestFile(BaseModel):
    name: str
    category: str
    created: datetime
    age_seconds: float
    age: str


class QueueRecord(BaseModel):
    path: str
    exists: bool
    counts: Dict[str, int] = Field(default_factory=dict, description="Files per category, plus 'total'")
    oldest_file: Optional[OldestFile] = None
    thresholds: QueueThresholds
    status: QueueHealth

    @property
    def short_name(self) -> str:
        return "/".join(self.path.rstrip("/").split("/")[-2:])

    @property
    def fill_percent(self) -> float:
        dead = self.thresholds.files[2]
        if dead <= 0:
            return 100.0 if self.counts.get("total", 0) else 0.0
        return min(100.0, self.counts.get("total", 0) / dead * 100)


class QueueStatus(BaseModel):
    queues: List[QueueRecord] = Field(default_factory=list)
    totals: Dict[str, int] = Field(default_factory=dict, description="Files per category across all queues, plus 'total'")


# ---------------- Services & processes ----------------


class ServiceRecord(BaseModel):
    name: str
    status: str = "inactive"
    version: Optional[str] = "unknown"
    cpu: float = 0.0
    memory: int = 0
    threads: Optional[int] = None
    uptime: Optional[int] = None
    artifacts: List[str] = Field(default_factory=list)


class ProcessRecord(BaseModel):
    pid: int
    ppid: int
    cmd: str
    cpu: float = 0.0
    mem: float = 0.0


class AgentProcessInfo(BaseModel):
    pid: int
    version: str
    uptime: float


# ---------------- Aggregates ----------------


class StatusSnapshot(BaseModel):
    timestamp: str
    system: SystemInfo
    memory: MemoryInfo
    disk: DiskInfo
    process: AgentProcessInfo
    queues: List[QueueRecord]
    queue_totals: Dict[str, int]
    services: List[ServiceRecord]
    top_processes: List[ProcessRecord]


class ServerStats(BaseModel):
    memory: ProcessMemory
    uptime: float
    disk: DiskInfo
