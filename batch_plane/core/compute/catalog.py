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

"""Instance type catalog used to check reservations against tiers.

Entries of a tier's instance list may name a single type (``c5.large``),
a whole family (``c5``) or the provider-chosen ``optimal`` set.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .exceptions import ValidationError
from .value_objects import ResourceReservation

OPTIMAL = "optimal"

# Families the substrate picks from when a tier names no instance types.
OPTIMAL_FAMILIES: Tuple[str, ...] = ("c4", "m4", "r4", "c5", "m5", "r5")


@dataclass(frozen=True)
class InstanceShape:
    """vCPU and memory of one instance type."""

    instance_type: str
    vcpus: int
    memory_mib: int

    @property
    def family(self) -> str:
        return self.instance_type.split(".", 1)[0]

    def fits(self, reservation: ResourceReservation) -> bool:
        """Check if one job with this reservation fits on the instance."""
        return (
            self.vcpus >= reservation.vcpus
            and self.memory_mib >= reservation.memory_mib
        )


_DEFAULT_SHAPES: Dict[str, Tuple[int, int]] = {
    "c4.large": (2, 3840),
    "c4.xlarge": (4, 7680),
    "c4.2xlarge": (8, 15360),
    "c4.4xlarge": (16, 30720),
    "c4.8xlarge": (36, 61440),
    "m4.large": (2, 8192),
    "m4.xlarge": (4, 16384),
    "m4.2xlarge": (8, 32768),
    "m4.4xlarge": (16, 65536),
    "m4.10xlarge": (40, 163840),
    "m4.16xlarge": (64, 262144),
    "r4.large": (2, 15616),
    "r4.xlarge": (4, 31232),
    "r4.2xlarge": (8, 62464),
    "r4.4xlarge": (16, 124928),
    "r4.8xlarge": (32, 249856),
    "r4.16xlarge": (64, 499712),
    "c5.large": (2, 4096),
    "c5.xlarge": (4, 8192),
    "c5.2xlarge": (8, 16384),
    "c5.4xlarge": (16, 32768),
    "c5.9xlarge": (36, 73728),
    "c5.18xlarge": (72, 147456),
    "m5.large": (2, 8192),
    "m5.xlarge": (4, 16384),
    "m5.2xlarge": (8, 32768),
    "m5.4xlarge": (16, 65536),
    "m5.12xlarge": (48, 196608),
    "m5.24xlarge": (96, 393216),
    "r5.large": (2, 16384),
    "r5.xlarge": (4, 32768),
    "r5.2xlarge": (8, 65536),
    "r5.4xlarge": (16, 131072),
    "r5.12xlarge": (48, 393216),
    "r5.24xlarge": (96, 786432),
}


class InstanceCatalog:
    """Lookup of instance shapes by type, family or ``optimal``."""

    def __init__(self, shapes: Optional[Mapping[str, Tuple[int, int]]] = None) -> None:
        """Initialize the catalog.

        Args:
            shapes: Mapping of instance type to (vCPUs, memory MiB).
                Defaults to the built-in table of optimal families.
        """
        table = _DEFAULT_SHAPES if shapes is None else shapes
        self._shapes: Dict[str, InstanceShape] = {
            name: InstanceShape(name, vcpus, memory)
            for name, (vcpus, memory) in table.items()
        }

    def knows(self, entry: str) -> bool:
        """Check if a type, family or ``optimal`` entry resolves to any shape."""
        try:
            return bool(self.resolve([entry]))
        except ValidationError:
            return False

    def resolve(self, entries: Iterable[str]) -> List[InstanceShape]:
        """Expand instance entries into concrete shapes.

        An empty list means provider-optimal.

        Raises:
            ValidationError: If an entry names no known type or family.
        """
        entries = list(entries) or [OPTIMAL]
        shapes: Dict[str, InstanceShape] = {}
        for entry in entries:
            matched = self._match(entry)
            if not matched:
                raise ValidationError(f"Unknown instance type or family: {entry!r}")
            for shape in matched:
                shapes[shape.instance_type] = shape
        return sorted(shapes.values(), key=lambda s: (s.vcpus, s.memory_mib, s.instance_type))

    def _match(self, entry: str) -> List[InstanceShape]:
        if entry == OPTIMAL:
            return [s for s in self._shapes.values() if s.family in OPTIMAL_FAMILIES]
        if "." in entry:
            shape = self._shapes.get(entry)
            return [shape] if shape else []
        return [s for s in self._shapes.values() if s.family == entry]


DEFAULT_CATALOG = InstanceCatalog()
