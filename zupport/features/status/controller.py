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

from fastapi import APIRouter, Request

from zupport.common.errors import InternalError
from zupport.common.rendering import render_fragment, wants_fragment
from zupport.features.status.service import StatusService
from zupport.features.status.structures import ServerStats, StatusSnapshot

logger = logging.getLogger(__name__)


class StatusController:
    """
    Host status endpoints. Each request builds one snapshot and renders it
    either as JSON or, for htmx callers, as an HTML fragment.
    """

    def __init__(self, router: APIRouter, service: StatusService):
        self.service = service
        self._register_routes(router)

    def _register_routes(self, router: APIRouter):

        @router.get(
            "/status",
            tags=["Status"],
            summary="Full host, service and queue status",
            response_model=StatusSnapshot,
        )
        async def status(request: Request):
            try:
                snapshot = await self.service.snapshot()
            except Exception as e:
                logger.exception("Error getting system status")
                raise InternalError("Failed to get system status") from e
            if wants_fragment(request):
                return render_fragment(request, "status.html", {"status": snapshot})
            return snapshot

        @router.get(
            "/server-stats",
            tags=["Status"],
            summary="Lightweight agent and disk metrics",
            response_model=ServerStats,
        )
        async def server_stats(request: Request):
            try:
                stats = await self.service.server_stats()
            except Exception as e:
                logger.exception("Error getting server stats")
                raise InternalError("Failed to get server stats") from e
            if wants_fragment(request):
                return render_fragment(request, "server_stats.html", {"stats": stats})
            return stats
