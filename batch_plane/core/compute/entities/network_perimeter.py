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

"""Network perimeter entity."""

import re
from dataclasses import dataclass
from typing import ClassVar, Iterable, Optional, Tuple

from ..exceptions import ValidationError
from ..value_objects import (
    AddressBlock,
    InboundRule,
    NetworkProtocol,
    ResourceId,
    parse_address,
)


@dataclass(frozen=True)
class NetworkPerimeter:
    """Network segment and inbound allow-list shared by capacity tiers.

    Inbound traffic is denied unless a rule allows it. Outbound traffic is
    allowed unless ``allow_all_outbound`` is turned off.

    Attributes:
        resource_id: Logical id of the perimeter.
        name: Physical name of the perimeter's security group.
        address_block: IPv4 block of the network.
        allowed_inbound: Inbound allow rules.
        max_availability_zones: Number of zones public subnets are spread over.
        allow_all_outbound: Allow all outbound traffic.
    """

    resource_id: ResourceId
    name: str
    address_block: AddressBlock
    allowed_inbound: Tuple[InboundRule, ...] = ()
    max_availability_zones: int = 4
    allow_all_outbound: bool = True

    NAME_PATTERN: ClassVar[str] = r'^[A-Za-z0-9 ._\-:/()#,@\[\]+=&;{}!$*]{1,255}$'

    def __post_init__(self) -> None:
        rid = str(self.resource_id)
        object.__setattr__(self, "allowed_inbound", tuple(self.allowed_inbound))
        if not re.match(self.NAME_PATTERN, self.name or "") or self.name.lower().startswith("sg-"):
            raise ValidationError(f"Invalid perimeter name: {self.name!r}", resource_id=rid)
        if not 1 <= self.max_availability_zones <= 6:
            raise ValidationError(
                f"max_availability_zones must be between 1 and 6, "
                f"got {self.max_availability_zones}",
                resource_id=rid,
            )
        if len(set(self.allowed_inbound)) != len(self.allowed_inbound):
            raise ValidationError("Inbound rules contain duplicates", resource_id=rid)

    @classmethod
    def create(
        cls,
        resource_id: ResourceId,
        name: str,
        cidr: str,
        allowed_inbound: Iterable[InboundRule] = (),
        max_availability_zones: int = 4,
    ) -> "NetworkPerimeter":
        """Build a default-deny inbound / default-allow outbound perimeter.

        Raises:
            ValidationError: If the CIDR or any rule is malformed.
        """
        return cls(
            resource_id=resource_id,
            name=name,
            address_block=AddressBlock(cidr),
            allowed_inbound=tuple(allowed_inbound),
            max_availability_zones=max_availability_zones,
        )

    @property
    def physical_name(self) -> str:
        return self.name

    def subnet_blocks(self) -> Tuple[str, ...]:
        """Split the address block into one public subnet per zone."""
        network = self.address_block.network
        extra_bits = max(0, (self.max_availability_zones - 1).bit_length())
        subnets = network.subnets(prefixlen_diff=min(extra_bits, 32 - network.prefixlen))
        return tuple(str(s) for s, _ in zip(subnets, range(self.max_availability_zones)))

    def allows_inbound(
        self,
        address: str,
        protocol: NetworkProtocol,
        port: Optional[int] = None,
    ) -> bool:
        """Check if inbound traffic would be admitted by the allow-list."""
        parse_address(address)
        return any(rule.matches(address, protocol, port) for rule in self.allowed_inbound)
