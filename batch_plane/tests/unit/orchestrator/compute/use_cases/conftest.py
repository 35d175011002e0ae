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

"""Shared fixtures for use case tests."""

from typing import Dict, List, Optional, Tuple

import pytest

from batch_plane.core.compute.ports import Diagnostic, ProvisioningResult
from batch_plane.core.compute.rendered import RenderedGraph
from batch_plane.core.compute.value_objects import (
    EnvironmentTarget,
    ResourceId,
    SubmissionId,
)
from batch_plane.stacks.starter import build_starter_stack


class FakeProvisioner:
    """In-memory fake implementation of Provisioner."""
    def __init__(self, result: Optional[ProvisioningResult] = None) -> None:
        """Initialize the fake provisioner."""
        self._result = result or ProvisioningResult(succeeded=True, location="memory://")
        self.calls: List[Tuple[str, RenderedGraph, EnvironmentTarget]] = []

    def provision(
        self,
        stack_name: str,
        graph: RenderedGraph,
        environment: EnvironmentTarget,
    ) -> ProvisioningResult:
        """Record the call and return the configured result."""
        self.calls.append((stack_name, graph, environment))
        return self._result


class FakeCapacityUsage:
    """In-memory fake implementation of CapacityUsage."""
    def __init__(self, usage: Optional[Dict[str, int]] = None) -> None:
        """Initialize with vCPUs in use per tier id."""
        self._usage = dict(usage or {})
        self.queried: List[str] = []

    def used_vcpus(self, tier_id: ResourceId) -> int:
        """Return vCPUs in use, 0 when unknown."""
        self.queried.append(str(tier_id))
        return self._usage.get(str(tier_id), 0)


class FakeSubmissionIdGenerator:
    """Fake SubmissionId generator for testing."""
    def __init__(self):
        """Initialize the fake generator."""
        self._counter = 1

    def generate(self) -> SubmissionId:
        """Generate a predictable SubmissionId for testing."""
        submission_id = f"018e1234-5678-7abc-9def-123456789{self._counter:03d}"
        self._counter += 1
        return SubmissionId(submission_id)


@pytest.fixture
def provisioner():
    """Provide a fake provisioner that accepts everything."""
    return FakeProvisioner()


@pytest.fixture
def rejecting_provisioner():
    """Provide a fake provisioner that rejects the job definition."""
    return FakeProvisioner(ProvisioningResult(
        succeeded=False,
        diagnostics=[Diagnostic(resource_id="JobDefinition", message="quota exceeded")],
    ))


@pytest.fixture
def submission_id_generator():
    """Provide fake submission id generator."""
    return FakeSubmissionIdGenerator()


@pytest.fixture
def starter_graph(environment):
    """Provide the reference stack."""
    return build_starter_stack(environment)


@pytest.fixture
def capacity_usage():
    """Provide a factory for fake capacity usage snapshots."""
    return FakeCapacityUsage
