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

"""CompileGraph response DTO."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from batch_plane.core.compute.ports import ProvisioningResult
from batch_plane.core.compute.rendered import RenderedGraph


@dataclass(frozen=True)
class CompileGraphResponse:
    """Response DTO for graph compilation.

    Attributes:
        stack_name: Deployment name.
        account: Target account.
        region: Target region.
        resource_count: Number of rendered resources.
        override_count: Number of post-render overrides applied.
        succeeded: True if the provisioner accepted the graph.
        diagnostics: (resource id, message) pairs from the provisioner.
        location: Where the provisioner placed the result, if it reports one.
    """

    stack_name: str
    account: str
    region: str
    resource_count: int
    override_count: int
    succeeded: bool
    diagnostics: Tuple[Tuple[Optional[str], str], ...] = ()
    location: Optional[str] = None

    @staticmethod
    def from_result(
        stack_name: str,
        graph: RenderedGraph,
        override_count: int,
        result: ProvisioningResult,
    ) -> "CompileGraphResponse":
        """Create response DTO from a rendered graph and provisioning result.

        Args:
            stack_name: Deployment name.
            graph: Rendered graph handed to the provisioner.
            override_count: Number of overrides applied.
            result: Provisioner outcome.

        Returns:
            CompileGraphResponse DTO with serialized values.
        """
        diagnostics: List[Tuple[Optional[str], str]] = [
            (d.resource_id, d.message) for d in result.diagnostics
        ]
        return CompileGraphResponse(
            stack_name=stack_name,
            account=graph.environment.account,
            region=graph.environment.region,
            resource_count=len(graph.resources),
            override_count=override_count,
            succeeded=result.succeeded,
            diagnostics=tuple(diagnostics),
            location=result.location,
        )
