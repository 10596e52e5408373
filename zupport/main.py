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

#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Entrypoint for the Zupport monitoring agent.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from zupport import __version__
from zupport.application_context import SERVICE_NAME, ApplicationContext
from zupport.common.fastapi_handlers import register_exception_handlers
from zupport.common.http_logging import RequestResponseLogger
from zupport.common.structures import Settings
from zupport.features.command.controller import CommandController
from zupport.features.filesystem.controller import FilesystemController
from zupport.features.logs.controller import LogsController
from zupport.features.status.controller import StatusController
from zupport.features.system.controller import SystemController

# -----------------------
# LOGGING + ENVIRONMENT
# -----------------------

logger = logging.getLogger(__name__)


def _norm_origin(o) -> str:
    # Must match the browser's Origin header exactly (no trailing slash)
    return str(o).rstrip("/")


def load_environment(dotenv_path: str = "./config/.env"):
    if load_dotenv(dotenv_path):
        logging.getLogger().info(f"✅ Loaded environment variables from: {dotenv_path}")
    else:
        logging.getLogger().warning(f"⚠️ No .env file found at: {dotenv_path}")


# -----------------------
# APP CREATION
# -----------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        load_environment()
        settings = Settings()
    base_url = settings.base_path

    context = ApplicationContext(settings)
    context.logging.start()
    logger.info(f"🛠️ create_app() called with base_url={base_url or '/'}")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"🚀 {SERVICE_NAME} {__version__} listening on {settings.host}:{settings.port}{base_url}")
        try:
            yield
        finally:
            logger.info("🧹 Lifespan exit: orderly shutdown.")
            await context.shutdown()

    app = FastAPI(
        title="Zupport",
        version=__version__,
        docs_url=f"{base_url}/docs",
        redoc_url=f"{base_url}/redoc",
        openapi_url=f"{base_url}/openapi.json",
        lifespan=lifespan,
    )
    app.state.context = context

    register_exception_handlers(app)
    allowed_origins = list({_norm_origin(o) for o in settings.authorized_origins})
    logger.info("[CORS] allow_origins=%s", allowed_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "HX-Request", "HX-Target", "HX-Current-URL"],
    )
    app.add_middleware(RequestResponseLogger, skip_paths=frozenset({f"{base_url}/health"}))

    router = APIRouter(prefix=base_url)
    SystemController(router, context.status.uptime)
    StatusController(router, context.status)
    LogsController(router, context.log_tail, context.log_generator)
    FilesystemController(router, context.editable_files)
    CommandController(router, context.commands)
    app.include_router(router)
    logger.info("🧩 All controllers registered.")

    static_dir = settings.static_dir
    if static_dir.is_dir():
        app.mount(base_url or "/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.info(f"Serving dashboard from {static_dir.resolve()}")
    else:
        logger.warning(f"Static directory {static_dir} not found, dashboard page disabled")
    return app


def run() -> None:
    load_environment()
    settings = Settings()
    uvicorn.run(
        "zupport.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
