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
from pathlib import Path
from typing import List

import aiofiles
import aiofiles.os

from zupport.common.errors import AccessDenied

logger = logging.getLogger(__name__)


class LocalFilesystem:
    """
    Async local filesystem confined to a root directory.
    Every path is resolved against the root and rejected if it escapes it.
    """

    def __init__(self, root: str | Path):
        """
        Args:
            root (str | Path): Path to the root directory for this filesystem.
        """
        self.root = Path(root).expanduser().resolve()

    def _resolve_path(self, path: str) -> Path:
        """
        Resolve a user-provided path relative to the root.

        Raises:
            AccessDenied: If the resolved path is not contained in the root.
        """
        final_path = (self.root / path).resolve()
        if final_path != self.root and not final_path.is_relative_to(self.root):
            raise AccessDenied(
                "Access denied: path outside allowed directory",
                details={"path": path},
            )
        return final_path

    async def list(self) -> List[str]:
        """Names of the entries directly under the root, sorted."""
        names = await aiofiles.os.listdir(self.root)
        return sorted(names)

    async def cat(self, path: str) -> str:
        """
        Read a file and return its content as a UTF-8 string.

        Raises:
            FileNotFoundError, IsADirectoryError, PermissionError, UnicodeDecodeError
        """
        full = self._resolve_path(path)
        async with aiofiles.open(full, "r", encoding="utf-8") as f:
            return await f.read()

    async def write(self, path: str, data: str) -> None:
        """
        Write text to a file, replacing any previous content. No locking: the
        last writer wins.

        Raises:
            FileNotFoundError: If the parent directory does not exist.
        """
        full = self._resolve_path(path)

        if not full.parent.exists():
            raise FileNotFoundError(f"Parent directory does not exist: '{full.parent}'")

        async with aiofiles.open(full, "w", encoding="utf-8") as f:
            await f.write(data)
