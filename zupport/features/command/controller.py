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

from fastapi import APIRouter

from zupport.features.command.service import CommandService
from zupport.features.command.structures import ExecuteRequest, ExecuteResponse

logger = logging.getLogger(__name__)


class CommandController:
    def __init__(self, router: APIRouter, service: CommandService):
        self.service = service

        @router.post(
            "/execute",
            tags=["Commands"],
            summary="Run a shell command and return its output",
            response_model=ExecuteResponse,
        )
        async def execute(request: ExecuteRequest):
            return await self.service.execute(request.command)
