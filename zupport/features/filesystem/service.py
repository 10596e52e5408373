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
from typing import List

from zupport.common.errors import InternalError, NotFound
from zupport.features.filesystem.local_filesystem import LocalFilesystem

logger = logging.getLogger(__name__)


class FilesystemService:
    """
    File Access Gateway over one root directory.

    Two instances exist at runtime: one over the editable directory and one
    over the log directory (listing only).
    """

    def __init__(self, fs: LocalFilesystem, label: str):
        self.fs = fs
        self.label = label

    async def list(self) -> List[str]:
        try:
            return await self.fs.list()
        except OSError as e:
            logger.error(f"Error reading {self.label} directory {self.fs.root}: {e}")
            raise InternalError(f"Failed to read {self.label} directory") from e

    async def read(self, path: str) -> str:
        try:
            return await self.fs.cat(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading file {path}: {e}")
            raise NotFound("Failed to read file", details={"file": path}) from e

    async def write(self, path: str, content: str) -> None:
        try:
            await self.fs.write(path, content)
        except OSError as e:
            logger.error(f"Error writing to file {path}: {e}")
            raise InternalError("Failed to write file") from e
        logger.info(f"File {path} updated in {self.fs.root}")
