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

"""SubmitJob use case implementation."""

import logging
from typing import Dict, Optional

from batch_plane.core.compute.catalog import InstanceCatalog
from batch_plane.core.compute.entities import DispatchQueue, JobTemplate, Placement
from batch_plane.core.compute.exceptions import ValidationError
from batch_plane.core.compute.graph import ResourceGraph
from batch_plane.core.compute.ports import CapacityUsage, SubmissionIdGenerator
from batch_plane.core.compute.services import ParameterResolver

from ..commands import SubmitJobCommand
from ..dtos import SubmissionResponse

logger = logging.getLogger(__name__)


class SubmitJobUseCase:
    """Use case for admitting one job instance to a dispatch queue.

    Every check that can fail runs before a submission id is issued:
    unknown parameters, a disabled queue and reservations no tier can
    ever satisfy are all rejected here rather than left to wait.

    Attributes:
        graph: Declared resources the template and queue are looked up in.
        usage: Capacity usage port.
        id_generator: Submission id generator.
        catalog: Instance catalog for family checks.
    """

    def __init__(
        self,
        graph: ResourceGraph,
        usage: CapacityUsage,
        id_generator: SubmissionIdGenerator,
        catalog: Optional[InstanceCatalog] = None,
    ) -> None:
        """Initialize use case with its dependencies.

        Args:
            graph: Declared resource graph.
            usage: Capacity usage implementation.
            id_generator: Submission id generator implementation.
            catalog: Instance catalog overriding each tier's own.
        """
        self._graph = graph
        self._usage = usage
        self._id_generator = id_generator
        self._catalog = catalog

    def execute(self, command: SubmitJobCommand) -> SubmissionResponse:
        """Execute a job submission.

        Args:
            command: SubmitJob command.

        Returns:
            SubmissionResponse DTO with the placement decision.

        Raises:
            ReferentialIntegrityError: If the template or queue is not declared.
            ValidationError: If parameters are unknown or the queue is disabled.
            UnsatisfiableReservationError: If no tier can ever run the job.
        """
        template = self._graph.get(command.template_id, JobTemplate, holder="submission")
        queue = self._graph.get(command.queue_id, DispatchQueue, holder="submission")
        if not queue.enabled:
            raise ValidationError(
                f"Queue {queue.name} is disabled",
                resource_id=str(queue.resource_id),
            )
        resolved = ParameterResolver.resolve(template, command.parameters)
        placement = queue.route(template.reservation, self._usage_snapshot(queue), self._catalog)
        submission_id = self._id_generator.generate()
        logger.info(
            "Submission %s of %s to %s: %s%s",
            submission_id,
            template.name,
            queue.name,
            placement.state.value,
            f" in {placement.tier_id}" if placement.tier_id else "",
        )
        return self._to_response(str(submission_id), template, queue, resolved, placement)

    def _usage_snapshot(self, queue: DispatchQueue) -> Dict[str, int]:
        """Read current vCPU usage for every tier of the queue once."""
        return {
            str(assignment.tier.resource_id): self._usage.used_vcpus(assignment.tier.resource_id)
            for assignment in queue.tiers
        }

    def _to_response(
        self,
        submission_id: str,
        template: JobTemplate,
        queue: DispatchQueue,
        command: tuple,
        placement: Placement,
    ) -> SubmissionResponse:
        """Map the decision to a response DTO."""
        return SubmissionResponse(
            submission_id=submission_id,
            template_name=template.name,
            template_revision=template.revision,
            queue_name=queue.name,
            command=command,
            placement_state=placement.state.value,
            tier_id=str(placement.tier_id) if placement.tier_id else None,
            timeout_seconds=template.timeout_seconds,
        )
