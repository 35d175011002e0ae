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

"""Launch template entity for capacity tier instances."""

import re
from dataclasses import dataclass
from typing import ClassVar, Tuple

from ..exceptions import ValidationError
from ..value_objects import ResourceId

VOLUME_TYPES = ("gp2", "gp3", "io1", "io2", "st1", "sc1", "standard")


@dataclass(frozen=True)
class BlockDevice:
    """EBS volume attached to every instance launched from a template."""

    device_name: str = "/dev/xvda"
    volume_size_gib: int = 100
    volume_type: str = "gp2"

    def __post_init__(self) -> None:
        if not re.match(r'^/dev/[a-z0-9]+$', self.device_name):
            raise ValidationError(f"Invalid device name: {self.device_name!r}")
        if self.volume_size_gib < 1 or self.volume_size_gib > 16384:
            raise ValidationError(
                f"Volume size must be between 1 and 16384 GiB, got {self.volume_size_gib}"
            )
        if self.volume_type not in VOLUME_TYPES:
            raise ValidationError(
                f"Unknown volume type: {self.volume_type!r}. "
                f"Must be one of: {list(VOLUME_TYPES)}"
            )


@dataclass(frozen=True)
class LaunchTemplate:
    """Instance launch settings shared by capacity tiers.

    Attributes:
        resource_id: Logical id of the launch template.
        name: Physical launch template name.
        block_devices: Volumes attached at launch.
    """

    resource_id: ResourceId
    name: str
    block_devices: Tuple[BlockDevice, ...] = (BlockDevice(),)

    NAME_PATTERN: ClassVar[str] = r'^[A-Za-z0-9().\-/_]{3,128}$'

    def __post_init__(self) -> None:
        object.__setattr__(self, "block_devices", tuple(self.block_devices))
        if not re.match(self.NAME_PATTERN, self.name or ""):
            raise ValidationError(
                f"Invalid launch template name: {self.name!r}",
                resource_id=str(self.resource_id),
            )
        devices = [d.device_name for d in self.block_devices]
        if len(devices) != len(set(devices)):
            raise ValidationError(
                f"Launch template repeats a device name: {devices}",
                resource_id=str(self.resource_id),
            )

    @property
    def physical_name(self) -> str:
        return self.name
