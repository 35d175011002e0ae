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

"""Capacity tier entity."""

import logging
import re
from dataclasses import dataclass, field
from typing import ClassVar, Iterable, List, Optional, Tuple

from ..catalog import DEFAULT_CATALOG, OPTIMAL, InstanceCatalog, InstanceShape
from ..exceptions import ValidationError
from ..value_objects import PriceStrategy, ResourceId, ResourceReservation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapacityTier:
    """Priced, bounded pool of compute capacity.

    Sizes are in vCPUs. ``min_size`` is always 0 so an idle tier costs
    nothing; any other value given by a caller is replaced.

    Attributes:
        resource_id: Logical id of the tier.
        name: Physical compute environment name.
        price_strategy: Spot or on-demand.
        max_size: Capacity ceiling in vCPUs.
        perimeter_id: Network perimeter the tier's instances run in.
        instance_types: Allowed types or families; empty means provider-optimal.
        bid_percentage: Spot price ceiling as percent of on-demand price.
        launch_template_id: Optional launch template for the instances.
        enabled: Whether the tier accepts work.
        min_size: Always 0.
        catalog: Instance catalog the types are checked against and resolved in.
    """

    resource_id: ResourceId
    name: str
    price_strategy: PriceStrategy
    max_size: int
    perimeter_id: ResourceId
    instance_types: Tuple[str, ...] = ()
    bid_percentage: Optional[int] = None
    launch_template_id: Optional[ResourceId] = None
    enabled: bool = True
    min_size: int = 0
    catalog: InstanceCatalog = field(default=DEFAULT_CATALOG, compare=False, repr=False)

    NAME_PATTERN: ClassVar[str] = r'^[A-Za-z0-9][A-Za-z0-9_-]{0,127}$'
    MIN_BID: ClassVar[int] = 0
    MAX_BID: ClassVar[int] = 100

    def __post_init__(self) -> None:
        """Force the idle size to zero and validate the tier."""
        rid = str(self.resource_id)
        if self.min_size != 0:
            logger.warning(
                "Tier %s requested min_size=%s; forcing 0 so idle cost is zero",
                rid,
                self.min_size,
            )
            object.__setattr__(self, "min_size", 0)
        object.__setattr__(self, "instance_types", tuple(self.instance_types))
        try:
            object.__setattr__(self, "price_strategy", PriceStrategy(self.price_strategy))
        except ValueError as exc:
            raise ValidationError(
                f"Unknown price strategy: {self.price_strategy!r}", resource_id=rid
            ) from exc
        if not re.match(self.NAME_PATTERN, self.name or ""):
            raise ValidationError(f"Invalid tier name: {self.name!r}", resource_id=rid)
        if isinstance(self.max_size, bool) or not isinstance(self.max_size, int) or self.max_size < 1:
            raise ValidationError(
                f"max_size must be a positive integer, got {self.max_size!r}",
                resource_id=rid,
            )
        self._validate_bid(rid)
        for entry in self.instance_types:
            if entry == OPTIMAL:
                raise ValidationError(
                    "Leave instance_types empty to request provider-optimal",
                    resource_id=rid,
                )
            if not self.catalog.knows(entry):
                raise ValidationError(
                    f"Unknown instance type or family: {entry!r}", resource_id=rid
                )

    def _validate_bid(self, rid: str) -> None:
        if self.price_strategy is PriceStrategy.SPOT:
            bid = self.bid_percentage
            if isinstance(bid, bool) or not isinstance(bid, int):
                raise ValidationError(
                    f"Spot tier needs an integer bid percentage, got {bid!r}",
                    resource_id=rid,
                )
            if not self.MIN_BID < bid <= self.MAX_BID:
                raise ValidationError(
                    f"Bid percentage must be in ({self.MIN_BID}, {self.MAX_BID}], got {bid}",
                    resource_id=rid,
                )
        elif self.bid_percentage is not None:
            raise ValidationError(
                "On-demand tier cannot carry a bid percentage", resource_id=rid
            )

    @classmethod
    def create(
        cls,
        resource_id: ResourceId,
        name: str,
        price_strategy: PriceStrategy,
        max_size: int,
        perimeter_id: ResourceId,
        instance_types: Iterable[str] = (),
        bid_percentage: Optional[int] = None,
        launch_template_id: Optional[ResourceId] = None,
        enabled: bool = True,
        min_size: int = 0,
        catalog: InstanceCatalog = DEFAULT_CATALOG,
    ) -> "CapacityTier":
        """Build a capacity tier.

        Raises:
            ValidationError: If bounds, bid or instance types are invalid.
        """
        return cls(
            resource_id=resource_id,
            name=name,
            price_strategy=price_strategy,
            max_size=max_size,
            perimeter_id=perimeter_id,
            instance_types=tuple(instance_types),
            bid_percentage=bid_percentage,
            launch_template_id=launch_template_id,
            enabled=enabled,
            min_size=min_size,
            catalog=catalog,
        )

    @property
    def physical_name(self) -> str:
        return self.name

    @property
    def provider_optimal(self) -> bool:
        """True when family selection is left to the substrate."""
        return not self.instance_types

    def shapes(self, catalog: Optional[InstanceCatalog] = None) -> List[InstanceShape]:
        return (catalog or self.catalog).resolve(self.instance_types)

    def can_ever_satisfy(
        self,
        reservation: ResourceReservation,
        catalog: Optional[InstanceCatalog] = None,
    ) -> bool:
        """Check if one job with this reservation could ever run in the tier."""
        if reservation.vcpus > self.max_size:
            return False
        return any(shape.fits(reservation) for shape in self.shapes(catalog))

    def has_headroom(self, reservation: ResourceReservation, used_vcpus: int) -> bool:
        """Check if the tier can admit one more job right now."""
        return used_vcpus + reservation.vcpus <= self.max_size
