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

"""Environment-driven settings for the batch plane tooling."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from batch_plane.core.compute.exceptions import ValidationError
from batch_plane.core.compute.value_objects import EnvironmentTarget

DEFAULT_PROVISIONER_TIMEOUT = 30.0
DEFAULT_OUTPUT_DIR = "cdk.out"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from ``BATCH_PLANE_*`` environment variables.

    Attributes:
        account: Target account, if configured.
        region: Target region, if configured.
        provisioner_url: Base URL of the reconciliation service, if any.
        provisioner_timeout: HTTP timeout in seconds.
        output_dir: Directory synthesized templates are written to.
        log_level: Root log level name.
    """

    account: Optional[str] = None
    region: Optional[str] = None
    provisioner_url: Optional[str] = None
    provisioner_timeout: float = DEFAULT_PROVISIONER_TIMEOUT
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment.

        Raises:
            ValidationError: If the timeout is not a positive number.
        """
        raw_timeout = os.getenv("BATCH_PLANE_PROVISIONER_TIMEOUT", str(DEFAULT_PROVISIONER_TIMEOUT))
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ValidationError(
                f"BATCH_PLANE_PROVISIONER_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from exc
        if timeout <= 0:
            raise ValidationError(
                f"BATCH_PLANE_PROVISIONER_TIMEOUT must be positive, got {timeout}"
            )
        return cls(
            account=os.getenv("BATCH_PLANE_ACCOUNT") or None,
            region=os.getenv("BATCH_PLANE_REGION") or None,
            provisioner_url=os.getenv("BATCH_PLANE_PROVISIONER_URL") or None,
            provisioner_timeout=timeout,
            output_dir=Path(os.getenv("BATCH_PLANE_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)),
            log_level=os.getenv("BATCH_PLANE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )

    def environment(self) -> EnvironmentTarget:
        """Return the configured target environment.

        Raises:
            ValidationError: If account or region is missing or malformed.
        """
        if not self.account or not self.region:
            raise ValidationError(
                "BATCH_PLANE_ACCOUNT and BATCH_PLANE_REGION must both be set"
            )
        return EnvironmentTarget(account=self.account, region=self.region)
