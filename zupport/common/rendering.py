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
HTML fragment rendering shared by the controllers.

A request asking for an embeddable fragment carries the `HX-Request` header
(htmx); everything else gets JSON.
"""

from pathlib import Path
from typing import Any, Dict

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from starlette.requests import HTTPConnection

from zupport.common.utils import format_age, format_duration

FRAGMENT_HEADER = "hx-request"
ERROR_STATUS_HEADER = "X-Zupport-Error-Status"

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.filters["duration"] = format_duration
templates.env.filters["age"] = format_age


def wants_fragment(conn: HTTPConnection) -> bool:
    return FRAGMENT_HEADER in conn.headers


def render_fragment(request: Request, template: str, context: Dict[str, Any], status_code: int = 200) -> HTMLResponse:
    return templates.TemplateResponse(request, template, context, status_code=status_code)


def render_error_fragment(request: Request, status_code: int, error: str, details: Any = None) -> HTMLResponse:
    """Error block for embedding pages: served as 200 so the page can swap it in."""
    response = render_fragment(request, "error.html", {"status_code": status_code, "error": error, "details": details})
    response.headers[ERROR_STATUS_HEADER] = str(status_code)
    return response
