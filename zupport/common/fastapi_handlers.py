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
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from zupport.common.errors import ZupportError
from zupport.common.rendering import render_error_fragment, wants_fragment

logger = logging.getLogger(__name__)


def error_response(request: Request, status_code: int, error: str, details: Optional[Any] = None) -> Response:
    """`{error, details?}` as JSON, or an equivalent HTML block for fragment requests."""
    if wants_fragment(request):
        return render_error_fragment(request, status_code, error, details)
    content: dict = {"error": error}
    if details is not None:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Register domain, validation and generic exception handlers for the FastAPI application."""

    @app.exception_handler(ZupportError)
    async def zupport_error_handler(request: Request, exc: ZupportError) -> Response:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
        return error_response(request, exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
        logger.warning(f"Invalid request on {request.url.path}: {exc.errors()}")
        details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()]
        return error_response(request, 400, "Invalid request", details)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> Response:
        """Handle all unhandled exceptions by logging and returning 500."""
        logger.error(
            f"Unhandled exception in {request.method} {request.url}: {exc}",
            exc_info=True,
        )
        return error_response(request, 500, str(exc) or "Internal server error")
