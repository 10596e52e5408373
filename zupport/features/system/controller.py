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

import socket
from datetime import datetime, timezone
from typing import Callable, Literal

from fastapi import APIRouter, Request
from pydantic import BaseModel

from zupport import __version__
from zupport.common.rendering import render_fragment, wants_fragment

ENVIRONMENTS = {
    "dv": "Development",
    "sb": "Sandbox",
    "zp": "Production",
}


def environment_for(hostname: str) -> str:
    """Deployment environment, from the two-letter host name prefix."""
    return ENVIRONMENTS.get(hostname[:2].lower(), "Other")


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    uptime: float
    timestamp: datetime


class VersionResponse(BaseModel):
    version: str
    server: str
    environment: str


class SystemController:
    def __init__(self, router: APIRouter, uptime: Callable[[], float]):
        self.uptime = uptime
        self._register_routes(router)

    def _register_routes(self, router: APIRouter):

        @router.get("/health", tags=["System"], summary="Liveness probe", response_model=HealthResponse)
        async def health():
            return HealthResponse(uptime=self.uptime(), timestamp=datetime.now(timezone.utc))

        @router.get("/version", tags=["System"], summary="Agent version and host", response_model=VersionResponse)
        async def version(request: Request):
            hostname = socket.gethostname()
            info = VersionResponse(version=__version__, server=hostname, environment=environment_for(hostname))
            if wants_fragment(request):
                return render_fragment(request, "version.html", {"info": info})
            return info
