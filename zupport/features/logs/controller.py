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
from typing import List, Optional

from fastapi import APIRouter, Query, WebSocket
from starlette.websockets import WebSocketState

from zupport.common.errors import BadRequest, NotFound
from zupport.features.logs.generator import LogGenerator
from zupport.features.logs.service import LogTailService
from zupport.features.logs.structures import (
    GenerateLogsRequest,
    GenerateLogsResponse,
    LogLine,
    LogsResponse,
)

logger = logging.getLogger(__name__)

POLICY_VIOLATION = 1008


async def _wait_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


class LogsController:
    """
    Log listing, live tailing over WebSocket, and the demo log generator.
    """

    def __init__(self, router: APIRouter, service: LogTailService, generator: LogGenerator):
        self.service = service
        self.generator = generator
        self._register_routes(router)

    def _register_routes(self, router: APIRouter):

        @router.get(
            "/logs",
            tags=["Logs"],
            summary="List files in the log directory",
            response_model=LogsResponse,
        )
        async def list_logs():
            return LogsResponse(logs=await self.service.list_logs())

        @router.post(
            "/logs/generate",
            tags=["Logs"],
            summary="Start or stop the demo log generator",
            response_model=GenerateLogsResponse,
        )
        async def generate_logs(request: GenerateLogsRequest):
            if request.action == "start":
                changed = self.generator.start()
                return GenerateLogsResponse(status="started" if changed else "no change")
            changed = await self.generator.stop()
            return GenerateLogsResponse(status="stopped" if changed else "no change")

        @router.websocket("/ws")
        async def tail_log(
            websocket: WebSocket,
            log: Optional[str] = Query(None),
            level: Optional[str] = Query(None),
        ):
            try:
                session = await self.service.open_session(log, level)
            except (BadRequest, NotFound) as e:
                logger.warning(f"[🔌 WebSocket] refusing tail of {log!r}: {e.message}")
                await websocket.close(code=POLICY_VIOLATION, reason=e.message)
                return

            async def send(line: LogLine) -> None:
                await websocket.send_json(line.model_dump(mode="json"))

            tasks: List[asyncio.Task] = []
            try:
                await websocket.accept()
                pump = asyncio.create_task(self.service.pump(session, send), name=f"tail-{session.id}")
                listener = asyncio.create_task(_wait_disconnect(websocket), name=f"tail-{session.id}-ws")
                tasks = [pump, listener]
                done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
                if pump in done and pump.exception() is not None:
                    logger.error(f"[tail {session.id}] stream stopped: {pump.exception()!r}")
            finally:
                for task in tasks:
                    task.cancel()
                await self.service.close_session(session)
                if websocket.client_state == WebSocketState.CONNECTED:
                    await websocket.close()
