# Copyright 2026 Dell Inc. or its subsidiaries. All Rights Reserved.
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

"""Infrastructure exceptions."""

from typing import Optional


class ProvisionerError(Exception):
    """The provisioner could not be reached or failed unexpectedly."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        """Initialize provisioner error.

        Args:
            message: Human-readable error description.
            status_code: HTTP status returned by the provisioner, if any.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DeclarationError(Exception):
    """A stack declaration file is missing, unreadable or malformed."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
