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
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional

from zupport.common.errors import BadRequest, NotFound
from zupport.features.filesystem.service import FilesystemService
from zupport.features.logs.structures import LogLine, LogStreamSession, SessionState

logger = logging.getLogger(__name__)

Sender = Callable[[LogLine], Awaitable[None]]


class WatchRegistry:
    """Open file watches, keyed by session id. Only touched from the event loop."""

    def __init__(self):
        self._sessions: Dict[str, LogStreamSession] = {}

    def register(self, session: LogStreamSession) -> None:
        self._sessions[session.id] = session

    def release(self, session: LogStreamSession) -> None:
        self._sessions.pop(session.id, None)

    def sessions(self) -> List[LogStreamSession]:
        return list(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)


class LogTailService:
    """
    Log Tail Streamer.

    `open_session` validates the request and opens the watch
    (connecting → watching), `pump` forwards appended lines until it is
    cancelled or the file becomes unreadable, `close_session` releases the
    watch (→ closed). The caller owns the session and must close it on every
    exit path.
    """

    def __init__(self, log_dir: Path, logs: FilesystemService, poll_interval: float = 0.25):
        self.log_dir = Path(log_dir)
        self.logs = logs
        self.poll_interval = poll_interval
        self.registry = WatchRegistry()

    async def list_logs(self) -> List[str]:
        return await self.logs.list()

    async def open_session(self, log: Optional[str], level: Optional[str] = None) -> LogStreamSession:
        if not log:
            raise BadRequest("log parameter is required")
        # joined as-is: the tail endpoint does not confine names to the log directory
        session = LogStreamSession(log_name=log, path=self.log_dir / log, level=level)
        try:
            await session.tail.open()
        except OSError as e:
            session.state = SessionState.CLOSED
            raise NotFound(f"Cannot open log file {log}", details=str(e)) from e
        session.state = SessionState.WATCHING
        self.registry.register(session)
        logger.info(f"[tail {session.id}] watching {session.path} (level={session.level or 'ALL'})")
        return session

    async def pump(self, session: LogStreamSession, send: Sender) -> None:
        """Forward matching lines to `send` until cancelled. Read errors propagate."""
        while session.state == SessionState.WATCHING:
            for line in await session.tail.read_lines():
                if session.matches(line):
                    await send(session.to_message(line))
            await asyncio.sleep(self.poll_interval)

    async def close_session(self, session: LogStreamSession) -> None:
        if session.state == SessionState.CLOSED and not session.tail.is_open:
            return
        session.state = SessionState.CLOSED
        try:
            await session.tail.close()
        finally:
            self.registry.release(session)
        logger.info(f"[tail {session.id}] closed watch on {session.path}")

    async def close_all(self) -> None:
        for session in self.registry.sessions():
            await self.close_session(session)
