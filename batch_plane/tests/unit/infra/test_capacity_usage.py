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

"""Unit tests for SnapshotCapacityUsage."""

import pytest

from batch_plane.core.compute.value_objects import ResourceId
from batch_plane.infra.capacity_usage import SnapshotCapacityUsage


class TestSnapshotCapacityUsage:
    """Tests for snapshot usage reporting."""

    def test_reports_snapshot(self):
        """Listed tiers report their usage; others are idle."""
        usage = SnapshotCapacityUsage.parse(["High=6", "Default=0"])

        assert usage.used_vcpus(ResourceId("High")) == 6
        assert usage.used_vcpus(ResourceId("Default")) == 0
        assert usage.used_vcpus(ResourceId("Other")) == 0

    def test_last_entry_wins(self):
        """Repeated tiers keep the last reported value."""
        usage = SnapshotCapacityUsage.parse(["High=2", "High=4"])

        assert usage.used_vcpus(ResourceId("High")) == 4

    @pytest.mark.parametrize("entry", ["High", "=4", "High=-1", "High=two"])
    def test_malformed_entries(self, entry):
        """Entries must be a tier id and a non-negative count."""
        with pytest.raises(ValueError, match="TIER=VCPUS"):
            SnapshotCapacityUsage.parse([entry])
