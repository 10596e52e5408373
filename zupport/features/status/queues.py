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
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from zupport.common.structures import QueueCategory, QueueWatch
from zupport.common.utils import format_age
from zupport.features.status.structures import OldestFile, QueueHealth, QueueRecord, QueueStatus

logger = logging.getLogger(__name__)


def classify_queue(count: int, thresholds: Sequence[int]) -> QueueHealth:
    """
    Health tier of a queue holding `count` files, given ascending file-count
    thresholds [tired, sick, dead]. An empty queue is always healthy.
    """
    tired, sick, dead = thresholds[0], thresholds[1], thresholds[2]
    if count == 0:
        return QueueHealth.HEALTHY
    if count >= dead:
        return QueueHealth.DEAD
    if count >= sick:
        return QueueHealth.SICK
    if count >= tired:
        return QueueHealth.TIRED
    return QueueHealth.HEALTHY


def _match_category(name: str, categories: Iterable[QueueCategory]) -> Optional[str]:
    for category in categories:
        if name.endswith(category.extension):
            return category.name
    return None


def _find_oldest(directory: Path, matched: List[Tuple[str, str]], now: float) -> Optional[OldestFile]:
    oldest: Optional[Tuple[float, str, str]] = None
    for name, category in matched:
        try:
            ctime = os.stat(directory / name).st_ctime
        except OSError:
            # file vanished between listing and stat
            continue
        if oldest is None or ctime < oldest[0]:
            oldest = (ctime, name, category)
    if oldest is None:
        return None
    ctime, name, category = oldest
    age_seconds = max(0.0, now - ctime)
    return OldestFile(
        name=name,
        category=category,
        created=datetime.fromtimestamp(ctime, tz=timezone.utc),
        age_seconds=age_seconds,
        age=format_age(age_seconds),
    )


def scan_queue(watch: QueueWatch, categories: List[QueueCategory], now: Optional[float] = None) -> QueueRecord:
    """Count the matched files of one monitored directory and classify it. Blocking."""
    now = time.time() if now is None else now
    directory = Path(watch.path)
    counts: Dict[str, int] = {c.name: 0 for c in categories}
    counts["total"] = 0

    if not directory.is_dir():
        return QueueRecord(path=watch.path, exists=False, counts=counts, thresholds=watch.thresholds, status=QueueHealth.HEALTHY)

    try:
        names = os.listdir(directory)
    except OSError as e:
        logger.warning(f"Cannot list queue {watch.path}: {e}")
        return QueueRecord(path=watch.path, exists=False, counts=counts, thresholds=watch.thresholds, status=QueueHealth.UNKNOWN)

    matched: List[Tuple[str, str]] = []
    for name in names:
        category = _match_category(name, categories)
        if category is not None:
            matched.append((name, category))
            counts[category] += 1
    counts["total"] = len(matched)

    return QueueRecord(
        path=watch.path,
        exists=True,
        counts=counts,
        oldest_file=_find_oldest(directory, matched, now),
        thresholds=watch.thresholds,
        status=classify_queue(counts["total"], watch.thresholds.files),
    )


def scan_queues(watches: List[QueueWatch], categories: List[QueueCategory], now: Optional[float] = None) -> QueueStatus:
    """Scan every monitored directory and sum the counts per category. Blocking."""
    now = time.time() if now is None else now
    totals: Dict[str, int] = {c.name: 0 for c in categories}
    totals["total"] = 0
    records: List[QueueRecord] = []
    for watch in watches:
        record = scan_queue(watch, categories, now)
        for key, value in record.counts.items():
            totals[key] = totals.get(key, 0) + value
        records.append(record)
    return QueueStatus(queues=records, totals=totals)
