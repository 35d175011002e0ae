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

"""Port interfaces (Protocols) for the compute domain.

These define the contracts that infrastructure implementations must satisfy.
Using Protocol instead of ABC allows for structural subtyping (duck typing).
"""

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from .rendered import RenderedGraph
from .value_objects import EnvironmentTarget, ResourceId, SecretReference, SubmissionId


@dataclass(frozen=True)
class Diagnostic:
    """Provisioner finding about one resource."""

    resource_id: Optional[str]
    message: str


@dataclass(frozen=True)
class ProvisioningResult:
    """Outcome of handing a rendered graph to a provisioner."""

    succeeded: bool
    diagnostics: List[Diagnostic] = field(default_factory=list)
    location: Optional[str] = None


class Provisioner(Protocol):
    """Port for the external system that reconciles a rendered graph."""

    def provision(
        self,
        stack_name: str,
        graph: RenderedGraph,
        environment: EnvironmentTarget,
    ) -> ProvisioningResult:
        """Reconcile live infrastructure to match the graph.

        Args:
            stack_name: Name of the deployment.
            graph: Fully rendered and overridden resource graph.
            environment: Explicit target environment.

        Returns:
            ProvisioningResult naming any offending resources.

        Raises:
            ProvisionerError: If the provisioner cannot be reached.
        """
        ...


class SecretStore(Protocol):
    """Port for the credential vault used while building identities."""

    environment: EnvironmentTarget

    def create_secret(
        self,
        resource_id: ResourceId,
        secret_name: str,
        initial_value: Optional[str] = None,
        key: Optional[str] = None,
    ) -> SecretReference:
        """Declare a secret and return a reference to it."""
        ...

    def grant_read(self, principal_id: ResourceId, secret: SecretReference) -> None:
        """Grant a principal read access to a secret."""
        ...

    def contains(self, secret: SecretReference) -> bool:
        """Check if the reference points at a secret in this store."""
        ...


class CapacityUsage(Protocol):
    """Port reporting vCPUs currently in use per tier."""

    def used_vcpus(self, tier_id: ResourceId) -> int:
        """Return vCPUs in use in a tier (0 when idle)."""
        ...


class SubmissionIdGenerator(Protocol):
    """Generator port for creating submission identifiers."""

    def generate(self) -> SubmissionId:
        """Generate a new submission identifier."""
        ...
