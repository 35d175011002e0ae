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

"""Capacity usage read from a fixed snapshot."""

import logging
from typing import Iterable, Mapping, Optional

from batch_plane.core.compute.ports import CapacityUsage
from batch_plane.core.compute.value_objects import ResourceId

logger = logging.getLogger(__name__)


class SnapshotCapacityUsage(CapacityUsage):
    """Report vCPUs in use from a snapshot taken by the caller.

    Tiers missing from the snapshot are idle.
    """

    def __init__(self, used: Optional[Mapping[str, int]] = None) -> None:
        self._used = dict(used or {})

    @classmethod
    def parse(cls, entries: Iterable[str]) -> "SnapshotCapacityUsage":
        """Build a snapshot from ``TIER=VCPUS`` entries.

        Raises:
            ValueError: If an entry is not a tier id and a
                non-negative vCPU count.
        """
        used = {}
        for entry in entries:
            tier_id, sep, count = entry.partition("=")
            if not sep or not tier_id or not count.isdigit():
                raise ValueError(f"Usage entry {entry!r} must look like TIER=VCPUS")
            used[tier_id] = int(count)
        return cls(used)

    def used_vcpus(self, tier_id: ResourceId) -> int:
        used = self._used.get(str(tier_id), 0)
        logger.debug("Tier %s has %s vCPUs in use", tier_id, used)
        return used
