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
from typing import Optional

from fastapi import APIRouter, Query

from zupport.common.errors import BadRequest
from zupport.features.filesystem.service import FilesystemService
from zupport.features.filesystem.structures import (
    EditableFilesResponse,
    EditFileRequest,
    EditFileResponse,
    FileContentResponse,
)

logger = logging.getLogger(__name__)


class FilesystemController:
    """
    Controller exposing the editable directory: list, read and write.
    Errors are raised as domain errors and rendered by the exception handlers.
    """

    def __init__(self, router: APIRouter, service: FilesystemService):
        self.service = service
        self._register_routes(router)

    def _register_routes(self, router: APIRouter):

        @router.get(
            "/editable-files",
            tags=["Files"],
            summary="List editable files",
            response_model=EditableFilesResponse,
        )
        async def list_editable_files():
            return EditableFilesResponse(files=await self.service.list())

        @router.get(
            "/file-content",
            tags=["Files"],
            summary="Read an editable file",
            response_model=FileContentResponse,
        )
        async def file_content(file: Optional[str] = Query(None, description="Path relative to the editable directory")):
            if not file:
                raise BadRequest("File parameter is required")
            return FileContentResponse(content=await self.service.read(file))

        @router.post(
            "/edit-file",
            tags=["Files"],
            summary="Write an editable file",
            response_model=EditFileResponse,
        )
        async def edit_file(request: EditFileRequest):
            if not request.file_path or request.content is None:
                raise BadRequest("File path and content are required")
            await self.service.write(request.file_path, request.content)
            return EditFileResponse(message="File updated successfully")
