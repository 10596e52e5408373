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
Incremental reading of a growing log file.

A FileTail keeps an open handle and a byte offset, and on every poll returns
the complete lines appended since the previous poll:
    - starts at the end of the file (only new lines are streamed)
    - buffers the bytes of a trailing partial line until its newline arrives,
      so a multi-byte character split across polls decodes intact
    - splits on line feeds only (form feeds and other separators stay in the line)
    - rewinds to the start when the file shrinks (truncation)
    - when the path now points at a different file (rotation), emits what is
      left in the old file, then reopens the new one from its start
"""

import logging
import os
from pathlib import Path
from typing import Any, List, Optional

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)


class FileTail:
    def __init__(self, path: Path):
        self.path = path
        self.offset = 0
        self.partial = b""
        self._handle: Optional[Any] = None
        self._inode: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    async def open(self, from_end: bool = True) -> None:
        """
        Open the file and position the offset.

        Raises:
            OSError: If the file does not exist or cannot be opened.
        """
        if self._handle is not None:
            return
        if not await aiofiles.os.path.isfile(self.path):
            raise FileNotFoundError(f"No such log file: '{self.path}'")
        self._handle = await aiofiles.open(self.path, "rb")
        st = os.fstat(self._handle.fileno())
        self._inode = st.st_ino
        self.offset = st.st_size if from_end else 0
        self.partial = b""

    async def close(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            await handle.close()

    def _split(self, data: bytes) -> List[str]:
        """Complete lines of `partial + data`; an unterminated tail stays buffered as bytes."""
        *complete, self.partial = (self.partial + data).split(b"\n")
        return [line.rstrip(b"\r").decode("utf-8", errors="replace") for line in complete]

    async def _drain(self) -> List[str]:
        size = os.fstat(self._handle.fileno()).st_size
        if size < self.offset:
            # truncated (logrotate copytruncate, manual clear, ...)
            self.offset = 0
            self.partial = b""
        if size == self.offset:
            return []
        await self._handle.seek(self.offset)
        data = await self._handle.read(size - self.offset)
        self.offset += len(data)
        return self._split(data)

    async def _reopen_if_rotated(self) -> List[str]:
        """Lines left in the old file when the path now points at a new one."""
        try:
            st = await aiofiles.os.stat(self.path)
        except FileNotFoundError:
            # rotated away and not recreated yet: keep reading the old handle
            return []
        if st.st_ino == self._inode:
            return []
        logger.debug(f"{self.path} was replaced, reopening")
        lines = await self._drain()
        if self.partial:
            lines.append(self.partial.rstrip(b"\r").decode("utf-8", errors="replace"))
        await self.close()
        await self.open(from_end=False)
        return lines

    async def read_lines(self) -> List[str]:
        """New complete lines since the last call."""
        if self._handle is None:
            raise RuntimeError("FileTail is not open")
        lines = await self._reopen_if_rotated()
        return lines + await self._drain()
