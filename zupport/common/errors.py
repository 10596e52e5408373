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

from typing import Any, Optional


class ZupportError(Exception):
    """Base class for errors surfaced to API clients as `{error, details?}`."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class BadRequest(ZupportError):
    status_code = 400


class AccessDenied(ZupportError):
    status_code = 403


class NotFound(ZupportError):
    status_code = 404


class InternalError(ZupportError):
    status_code = 500


class UpstreamFailure(ZupportError):
    """
    An OS or process introspection call failed.
    Raised by collectors and absorbed by the status aggregator, which degrades
    the affected field instead of failing the request.
    """

    def __init__(self, source: str, message: str, details: Optional[Any] = None):
        super().__init__(f"{source}: {message}", details)
        self.source = source
