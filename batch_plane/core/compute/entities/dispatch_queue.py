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

"""Dispatch queue entity and routing policy."""

import re
from dataclasses import dataclass
from typing import ClassVar, Iterable, List, Mapping, Optional, Tuple

from ..catalog import InstanceCatalog
from ..exceptions import UnsatisfiableReservationError, ValidationError
from ..value_objects import PlacementState, ResourceId, ResourceReservation
from .capacity_tier import CapacityTier


@dataclass(frozen=True)
class TierAssignment:
    """A tier and its priority within a queue; lower priority is tried first."""

    tier: CapacityTier
    priority: int

    def __post_init__(self) -> None:
        if isinstance(self.priority, bool) or not isinstance(self.priority, int) or self.priority < 0:
            raise ValidationError(
                f"Priority must be a non-negative integer, got {self.priority!r}",
                resource_id=str(self.tier.resource_id),
            )


@dataclass(frozen=True)
class Placement:
    """Routing decision for one job instance.

    Attributes:
        state: PLACED in a tier, or QUEUED until headroom appears.
        tier_id: Tier the job landed in, when placed.
    """

    state: PlacementState
    tier_id: Optional[ResourceId] = None

    @property
    def is_placed(self) -> bool:
        return self.state is PlacementState.PLACED


@dataclass(frozen=True)
class DispatchQueue:
    """Ordered routing policy across capacity tiers.

    Attributes:
        resource_id: Logical id of the queue.
        name: Physical queue name.
        tiers: Tier assignments in declaration order.
        enabled: Whether the queue accepts submissions.
    """

    resource_id: ResourceId
    name: str
    tiers: Tuple[TierAssignment, ...]
    enabled: bool = True

    NAME_PATTERN: ClassVar[str] = r'^[A-Za-z0-9][A-Za-z0-9_-]{0,127}$'

    def __post_init__(self) -> None:
        """Validate tiers, priorities and shared perimeter."""
        rid = str(self.resource_id)
        object.__setattr__(self, "tiers", tuple(self.tiers))
        if not re.match(self.NAME_PATTERN, self.name or ""):
            raise ValidationError(f"Invalid queue name: {self.name!r}", resource_id=rid)
        if not self.tiers:
            raise ValidationError("Queue needs at least one tier", resource_id=rid)
        tier_ids = [str(a.tier.resource_id) for a in self.tiers]
        duplicates = sorted({t for t in tier_ids if tier_ids.count(t) > 1})
        if duplicates:
            raise ValidationError(f"Queue lists tiers more than once: {duplicates}", resource_id=rid)
        perimeters = {a.tier.perimeter_id for a in self.tiers}
        if len(perimeters) > 1:
            raise ValidationError(
                f"Queue tiers span several perimeters: {sorted(map(str, perimeters))}",
                resource_id=rid,
            )

    @classmethod
    def create(
        cls,
        resource_id: ResourceId,
        name: str,
        tiers: Iterable[Tuple[CapacityTier, int]],
        enabled: bool = True,
    ) -> "DispatchQueue":
        """Build a queue from (tier, priority) pairs.

        Raises:
            ValidationError: If the tier list is empty or inconsistent.
        """
        return cls(
            resource_id=resource_id,
            name=name,
            tiers=tuple(TierAssignment(tier, priority) for tier, priority in tiers),
            enabled=enabled,
        )

    @property
    def physical_name(self) -> str:
        return self.name

    def ordered_tiers(self) -> List[CapacityTier]:
        """Return tiers by ascending priority, ties in declaration order."""
        indexed = sorted(enumerate(self.tiers), key=lambda item: (item[1].priority, item[0]))
        return [assignment.tier for _, assignment in indexed]

    def check_satisfiable(
        self,
        reservation: ResourceReservation,
        catalog: Optional[InstanceCatalog] = None,
    ) -> None:
        """Fail fast when no enabled tier can ever run the reservation.

        Raises:
            UnsatisfiableReservationError: If no tier can ever satisfy it.
        """
        if not any(
            tier.enabled and tier.can_ever_satisfy(reservation, catalog)
            for tier in self.ordered_tiers()
        ):
            raise UnsatisfiableReservationError(
                queue_id=str(self.resource_id),
                vcpus=reservation.vcpus,
                memory_mib=reservation.memory_mib,
            )

    def route(
        self,
        reservation: ResourceReservation,
        usage: Mapping[str, int],
        catalog: Optional[InstanceCatalog] = None,
    ) -> Placement:
        """Place a job in the first eligible tier with headroom, else queue it.

        Args:
            reservation: The job's reservation.
            usage: vCPUs currently in use, keyed by tier id string.
            catalog: Instance catalog for family checks. Defaults to each
                tier's own catalog.

        Returns:
            Placement decision.

        Raises:
            UnsatisfiableReservationError: If no tier can ever satisfy it.
        """
        self.check_satisfiable(reservation, catalog)
        for tier in self.ordered_tiers():
            if not tier.enabled or not tier.can_ever_satisfy(reservation, catalog):
                continue
            used = usage.get(str(tier.resource_id), 0)
            if tier.has_headroom(reservation, used):
                return Placement(PlacementState.PLACED, tier.resource_id)
        return Placement(PlacementState.QUEUED)
