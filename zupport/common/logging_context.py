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
#

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from rich.logging import RichHandler

logger = logging.getLogger(__name__)

ERROR_LOG_FILE = "error.log"
COMBINED_LOG_FILE = "combined.log"


# --- JSON formatter kept tiny and portable ---
class CompactJsonFormatter(logging.Formatter):
    def __init__(self, service_name: str):
        super().__init__()
        self.service = service_name

    def format(self, record: logging.LogRecord) -> str:
        base = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "file": record.filename,
            "line": record.lineno,
            "service": self.service,
            "message": record.getMessage(),
        }
        if record.exc_info:
            base["exception"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


class TaskNameFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        """Adds the current asyncio Task name to the log record."""
        try:
            current_task: Optional[asyncio.Task[Any]] = asyncio.current_task()
            if current_task is not None:
                record.task_name = current_task.get_name() or str(id(current_task))
            else:
                record.task_name = "Main"
        except RuntimeError:
            # not inside an asyncio loop (e.g., initial sync setup)
            record.task_name = "Sync"
        return True


class LoggingContext:
    """
    Owns the agent's own log handlers for the lifetime of one application.

    - `start()` installs the handlers on the root logger (console + two
      append-only JSON-lines files: errors only, and everything).
    - `close()` flushes and detaches them. It is called from the FastAPI
      lifespan shutdown.

    These files are the agent's own logs. They live in the log directory next
    to the externally produced files the agent tails.
    """

    def __init__(
        self,
        *,
        service_name: str,
        log_dir: Path,
        log_level: str = "INFO",
        console: bool = True,
        include_uvicorn: bool = True,
    ):
        self.service_name = service_name
        self.log_dir = Path(log_dir)
        self.log_level = log_level.upper()
        self.console = console
        self.include_uvicorn = include_uvicorn
        self._handlers: List[logging.Handler] = []
        self.started = False

    @property
    def error_log_path(self) -> Path:
        return self.log_dir / ERROR_LOG_FILE

    @property
    def combined_log_path(self) -> Path:
        return self.log_dir / COMBINED_LOG_FILE

    def start(self) -> "LoggingContext":
        if self.started:
            return self
        root = logging.getLogger()
        root.setLevel(self.log_level)
        for h in list(root.handlers):
            root.removeHandler(h)

        # 1) Human console (Rich)
        if self.console:
            formatter = logging.Formatter(
                fmt="%(asctime)s | %(levelname)s | [%(threadName)s/%(task_name)s] | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            console = RichHandler(
                rich_tracebacks=False,
                show_time=False,  # time is in the formatter
                show_level=True,
                show_path=True,
            )
            console.setFormatter(formatter)
            console.addFilter(TaskNameFilter())
            console.setLevel(self.log_level)
            self._add(root, console)

        # 2) Files (machine)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        json_formatter = CompactJsonFormatter(self.service_name)

        error_h = logging.FileHandler(self.error_log_path, encoding="utf-8")
        error_h.setLevel(logging.ERROR)
        error_h.setFormatter(json_formatter)
        self._add(root, error_h)

        combined_h = logging.FileHandler(self.combined_log_path, encoding="utf-8")
        combined_h.setLevel(self.log_level)
        combined_h.setFormatter(json_formatter)
        self._add(root, combined_h)

        # 3) Make uvicorn loggers flow into our handlers (no duplicates)
        if self.include_uvicorn:
            for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
                lg = logging.getLogger(name)
                lg.handlers.clear()
                lg.propagate = True

        self.started = True
        logger.info(f"Logging configured at {self.log_level} level (files in {self.log_dir}).")
        return self

    def close(self) -> None:
        if not self.started:
            return
        root = logging.getLogger()
        for h in self._handlers:
            h.flush()
            root.removeHandler(h)
            h.close()
        self._handlers.clear()
        self.started = False

    def _add(self, root: logging.Logger, handler: logging.Handler) -> None:
        root.addHandler(handler)
        self._handlers.append(handler)
