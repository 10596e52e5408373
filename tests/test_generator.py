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
import re
from datetime import datetime, timezone

import pytest

from zupport.features.logs.generator import COMPONENTS, LEVELS, LogGenerator, generate_line

LINE = re.compile(
    r"^(?P<ts>\S+) \[(?P<fishtag>\d{8}T\d{6}-[a-z0-9]{5})\] \[(?P<thread>[\w-]+-thread-\d+)\] "
    r"(?P<level>[A-Z]+) (?P<component>\w+) - (?P<message>.+)\n$"
)


def test_generated_line_format():
    now = datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
    match = LINE.match(generate_line(now))
    assert match is not None
    assert match["ts"].startswith("2025-03-04T05:06:07")
    assert match["fishtag"].startswith("20250304T050607-")
    assert match["level"] in LEVELS
    assert match["component"] in COMPONENTS


@pytest.mark.asyncio
async def test_generator_appends_until_stopped(tmp_path):
    generator = LogGenerator(tmp_path, interval=0.01)
    assert generator.start() is True
    assert generator.start() is False
    await asyncio.sleep(0.1)
    assert await generator.stop() is True
    assert await generator.stop() is False

    lines = generator.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) >= 2
    await asyncio.sleep(0.05)
    assert len(generator.path.read_text(encoding="utf-8").splitlines()) == len(lines)
