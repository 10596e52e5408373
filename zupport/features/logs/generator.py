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
Demo log producer: appends synthetic application log lines to a file in the
log directory so the tail endpoint can be exercised without a real workload.
"""

import asyncio
import logging
import random
import string
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiofiles

logger = logging.getLogger(__name__)

DEMO_LOG_FILE = "not-catalina.out"

LEVELS = ["INFO", "WARN", "ERROR", "DEBUG", "TRACE"]
COMPONENTS = ["UserController", "AuthService", "DataRepository", "SecurityFilter", "CacheManager"]
THREAD_PREFIXES = ["http-nio", "exec", "async", "pool"]


def _token(length: int) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def _messages() -> list[str]:
    return [
        "Processing request for user authentication",
        "Database connection pool status: active=5, idle=3",
        "Cache hit ratio: 85.5%",
        "Request validation failed: invalid token",
        f"Successfully processed transaction ID: TXN-{_token(6)}",
        "Memory usage threshold warning: 85% utilized",
        "Failed to connect to remote service: timeout",
        f"User session expired for ID: USR-{_token(6)}",
    ]


def generate_line(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    fishtag = f"{now.strftime('%Y%m%dT%H%M%S')}-{_token(5)}"
    thread = f"{random.choice(THREAD_PREFIXES)}-thread-{random.randint(1, 20)}"
    level = random.choice(LEVELS)
    component = random.choice(COMPONENTS)
    message = random.choice(_messages())
    return f"{now.isoformat(timespec='milliseconds')} [{fishtag}] [{thread}] {level} {component} - {message}\n"


class LogGenerator:
    def __init__(self, log_dir: Path, interval: float = 0.5):
        self.path = Path(log_dir) / DEMO_LOG_FILE
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        try:
            while True:
                async with aiofiles.open(self.path, "a", encoding="utf-8") as f:
                    await f.write(generate_line())
                await asyncio.sleep(self.interval)
        except OSError as e:
            logger.error(f"Demo log generator stopped: cannot write {self.path}: {e}")

    def start(self) -> bool:
        if self.running:
            return False
        self._task = asyncio.create_task(self._run(), name="log-generator")
        logger.info(f"Demo log generator writing to {self.path}")
        return True

    async def stop(self) -> bool:
        if not self.running:
            return False
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass  # expected when the task is cancelled
        logger.info("Demo log generator stopped")
        return True
