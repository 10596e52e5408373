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

from zupport.common.errors import BadRequest, InternalError
from zupport.common.utils import run_shell
from zupport.features.command.structures import ExecuteResponse

logger = logging.getLogger(__name__)


class CommandService:
    """
    Runs caller-supplied shell text on the host.

    There is no allow-list, no sandbox, no timeout and no output bound: the
    endpoint is an operator tool and is expected to be reachable by operators
    only. The external process is not cancelled when the client goes away.
    """

    async def execute(self, command: str | None) -> ExecuteResponse:
        if not command or not command.strip():
            raise BadRequest("Command is required")

        logger.info(f"Executing command: {command}")
        try:
            result = await run_shell(command)
        except OSError as e:
            logger.error(f"Error executing command {command}: {e}")
            raise InternalError(str(e)) from e

        if not result.ok:
            logger.error(f"Error executing command {command}: exit status {result.returncode}")
            raise InternalError(
                f"Command failed: {command}",
                details={"returncode": result.returncode, "stdout": result.stdout, "stderr": result.stderr},
            )
        return ExecuteResponse(stdout=result.stdout, stderr=result.stderr)
