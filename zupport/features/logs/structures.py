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

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel

from zupport.features.logs.tailer import FileTail

ALL_LEVELS = "ALL"


class SessionState(str, Enum):
    CONNECTING = "connecting"
    WATCHING = "watching"
    CLOSED = "closed"


class LogLine(BaseModel):
    """One message pushed to a tail client."""

    timestamp: datetime
    message: str
    level: str


@dataclass
class LogStreamSession:
    """
    One client's watch on one log file. Never shared: two clients tailing the
    same file each hold their own handle and offset.
    """

    log_name: str
    path: Path
    level: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: SessionState = SessionState.CONNECTING
    tail: FileTail = field(init=False)

    def __post_init__(self):
        self.level = self.level.upper() if self.level else None
        self.tail = FileTail(self.path)

    def matches(self, line: str) -> bool:
        return self.level is None or self.level.lower() in line.lower()

    def to_message(self, line: str) -> LogLine:
        return LogLine(timestamp=datetime.now(timezone.utc), message=line, level=self.level or ALL_LEVELS)


class LogsResponse(BaseModel):
    logs: List[str]


class GenerateLogsRequest(BaseModel):
    action: Literal["start", "stop"]


class GenerateLogsResponse(BaseModel):
    status: Literal["started", "stopped", "no change"]
