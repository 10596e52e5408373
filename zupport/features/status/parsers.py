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
Pure parse steps turning command / pseudo-file output into records.

Each parser is total: malformed input never raises, it degrades to the
documented fallback (zeros, empty lists, "Unknown"), so a parse problem stays
local to the field being parsed.
"""

import json
import logging
import re
from typing import Dict, List, Optional

from zupport.features.status.structures import MemoryDetails, MountRecord, OsDetails, ProcessRecord

logger = logging.getLogger(__name__)

# Pseudo filesystems that say nothing useful about real storage.
_IGNORED_DEVICE_PREFIXES = ("tmpfs", "devtmpfs", "overlay")
# Local NFS stunnel (amazon-efs-utils) mounts appear as 127.0.0.1:/
_EFS_PREFIX = "127.0.0.1"


def parse_meminfo(text: str) -> MemoryDetails:
    """`/proc/meminfo` → free physical and swap memory in kB. Fallback: zeros."""
    values: Dict[str, int] = {}
    for line in text.splitlines():
        match = re.match(r"^(\w+):\s+(\d+)", line)
        if match:
            values[match.group(1)] = int(match.group(2))
    return MemoryDetails(mem_free_kb=values.get("MemFree", 0), swap_free_kb=values.get("SwapFree", 0))


def parse_os_release(text: str, latest_release: str) -> OsDetails:
    """
    `/etc/os-release` → name, version and whether the host runs the latest
    release of its distribution. Fallback: "Unknown"/"unknown".
    """
    name_match = re.search(r'^NAME="?([^"\n]+)"?', text, re.MULTILINE)
    version_match = re.search(r'^VERSION="?([^"\n]+)"?', text, re.MULTILINE)
    if not name_match:
        return OsDetails()
    name = name_match.group(1)
    version = version_match.group(1) if version_match else "Unknown"
    is_latest = latest_release in version
    return OsDetails(name=name, version=version, status="current" if is_latest else "outdated")


def _is_network_device(device: str) -> bool:
    return device.startswith(_EFS_PREFIX) or device.startswith("//") or ":/" in device


def parse_df(text: str) -> List[MountRecord]:
    """
    `df -h` → one record per real mount. tmpfs/devtmpfs/overlay and loop
    devices are skipped; network mounts are flagged. Malformed lines are skipped.
    """
    records: List[MountRecord] = []
    for line in text.splitlines()[1:]:
        parts = line.split()
        if len(parts) < 6:
            continue
        device, size, used, available, capacity = parts[:5]
        mountpoint = " ".join(parts[5:])
        if device.startswith(_IGNORED_DEVICE_PREFIXES) or "loop" in device:
            continue
        display = f"EFS ({mountpoint})" if device.startswith(_EFS_PREFIX) else device
        records.append(
            MountRecord(
                filesystem=display,
                size=size,
                used=used,
                available=available,
                capacity=capacity,
                mountpoint=mountpoint,
                is_network=_is_network_device(device),
            )
        )
    return records


def parse_ps(text: str) -> List[ProcessRecord]:
    """
    `ps -eo pid,ppid,%cpu,%mem,comm` → process records. The header line and
    lines without numeric pid/ppid are skipped; unparsable percentages become 0.
    """
    processes: List[ProcessRecord] = []
    for line in text.splitlines()[1:]:
        parts = line.split()
        if len(parts) < 5:
            continue
        pid, ppid, cpu, mem = parts[:4]
        if not (pid.isdigit() and ppid.isdigit()):
            continue
        processes.append(
            ProcessRecord(
                pid=int(pid),
                ppid=int(ppid),
                cmd=" ".join(parts[4:]),
                cpu=_to_float(cpu),
                mem=_to_float(mem),
            )
        )
    return processes


def parse_main_pid(text: str) -> Optional[int]:
    """`systemctl show -p MainPID --value` → pid, or None when absent/zero."""
    value = text.strip().split("=")[-1]
    if value.isdigit() and int(value) > 0:
        return int(value)
    return None


def parse_version_probe(body: str) -> Optional[str]:
    """
    JSON `{success, version}` from an HTTP-probed service → version string, or
    None when the service does not report success.
    """
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict) or not payload.get("success"):
        return None
    return str(payload.get("version") or "unknown")


def _to_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0
