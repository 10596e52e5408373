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

import os
import time

import pytest

from zupport.common.structures import QueueCategory, QueueThresholds, QueueWatch
from zupport.features.status.queues import classify_queue, scan_queue, scan_queues
from zupport.features.status.structures import QueueHealth

CATEGORIES = [QueueCategory(name="xml", extension=".xml"), QueueCategory(name="pdf", extension=".pdf")]


@pytest.mark.parametrize(
    "count,expected",
    [
        (0, QueueHealth.HEALTHY),
        (1, QueueHealth.HEALTHY),
        (2, QueueHealth.TIRED),
        (3, QueueHealth.TIRED),
        (4, QueueHealth.SICK),
        (6, QueueHealth.DEAD),
        (600, QueueHealth.DEAD),
    ],
)
def test_classify_tiers(count, expected):
    assert classify_queue(count, [2, 4, 6]) is expected


def test_classify_is_monotonic_in_count():
    for thresholds in ([2, 5, 10], [100, 500, 1000], [1, 1, 1], [0, 0, 0]):
        severities = [classify_queue(n, thresholds).severity for n in range(1, 1200)]
        assert severities == sorted(severities)


def test_empty_queue_is_healthy_even_with_zero_thresholds():
    assert classify_queue(0, [0, 0, 0]) is QueueHealth.HEALTHY
    assert classify_queue(1, [0, 0, 0]) is QueueHealth.DEAD


class TestScanQueue:
    def _watch(self, path, files=(2, 4, 6)):
        return QueueWatch(path=str(path), thresholds=QueueThresholds(files=list(files)))

    def test_missing_directory_is_reported_not_raised(self, tmp_path):
        record = scan_queue(self._watch(tmp_path / "absent"), CATEGORIES)
        assert record.exists is False
        assert record.status is QueueHealth.HEALTHY
        assert record.counts == {"xml": 0, "pdf": 0, "total": 0}
        assert record.oldest_file is None

    def test_counts_matching_files_only(self, tmp_path):
        for name in ("a.xml", "b.xml", "c.pdf", "notes.txt", "d.xml.tmp"):
            (tmp_path / name).write_text("x")
        record = scan_queue(self._watch(tmp_path), CATEGORIES)
        assert record.exists is True
        assert record.counts == {"xml": 2, "pdf": 1, "total": 3}
        assert record.status is QueueHealth.TIRED

    def test_oldest_file_age_label(self, tmp_path):
        (tmp_path / "old.xml").write_text("x")
        (tmp_path / "new.pdf").write_text("x")
        ctime = os.stat(tmp_path / "old.xml").st_ctime
        record = scan_queue(self._watch(tmp_path), CATEGORIES, now=ctime + 3 * 3600 + 120)
        assert record.oldest_file is not None
        assert record.oldest_file.age == "3h"
        assert record.oldest_file.age_seconds >= 3 * 3600

    def test_totals_sum_across_queues(self, tmp_path):
        first = tmp_path / "one"
        second = tmp_path / "two"
        first.mkdir()
        second.mkdir()
        (first / "a.xml").write_text("x")
        (second / "b.pdf").write_text("x")
        (second / "c.pdf").write_text("x")
        status = scan_queues(
            [self._watch(first), self._watch(second), self._watch(tmp_path / "gone")],
            CATEGORIES,
            now=time.time(),
        )
        assert status.totals == {"xml": 1, "pdf": 2, "total": 3}
        assert [q.exists for q in status.queues] == [True, True, False]
