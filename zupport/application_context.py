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
Everything one running agent holds: settings, monitoring configuration, the
logging context and the feature services. One instance per application, kept
on `app.state.context`; nothing here is a module-level singleton, so tests can
build as many independent applications as they like.
"""

import logging
import time
from typing import Optional

from zupport.common.logging_context import LoggingContext
from zupport.common.structures import MonitoringConfig, Settings
from zupport.common.utils import parse_monitoring_configuration
from zupport.features.command.service import CommandService
from zupport.features.filesystem.local_filesystem import LocalFilesystem
from zupport.features.filesystem.service import FilesystemService
from zupport.features.logs.generator import LogGenerator
from zupport.features.logs.service import LogTailService
from zupport.features.status.service import StatusService

logger = logging.getLogger(__name__)

SERVICE_NAME = "zupport"


class ApplicationContext:
    def __init__(
        self,
        settings: Settings,
        monitoring: Optional[MonitoringConfig] = None,
        logging_context: Optional[LoggingContext] = None,
    ):
        self.settings = settings
        self.monitoring = monitoring or parse_monitoring_configuration(settings.monitoring_config)
        self.logging = logging_context or LoggingContext(
            service_name=SERVICE_NAME,
            log_dir=settings.log_dir,
            log_level=settings.log_level,
            console=settings.console_logging,
        )
        self.started_at = time.time()

        self.editable_files = FilesystemService(LocalFilesystem(settings.editable_dir), label="editable")
        self.log_files = FilesystemService(LocalFilesystem(settings.log_dir), label="logs")
        self.log_tail = LogTailService(settings.log_dir, self.log_files, poll_interval=settings.tail_poll_interval)
        self.log_generator = LogGenerator(settings.log_dir)
        self.commands = CommandService()
        self.status = StatusService(self.monitoring, self.started_at, display_timezone=settings.display_timezone)

    async def shutdown(self) -> None:
        """Stop background work and release every open watch, then detach logging."""
        try:
            await self.log_generator.stop()
            await self.log_tail.close_all()
        finally:
            logger.info("Zupport agent stopped.")
            self.logging.close()
