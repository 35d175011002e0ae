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

"""Unit tests for SubmitJobUseCase."""

import dataclasses

import pytest

from batch_plane.core.compute.entities import (
    CapacityTier,
    DispatchQueue,
    ImageSource,
    JobTemplate,
    NetworkPerimeter,
)
from batch_plane.core.compute.exceptions import (
    ReferentialIntegrityError,
    UnsatisfiableReservationError,
    ValidationError,
)
from batch_plane.core.compute.graph import ResourceGraph
from batch_plane.core.compute.value_objects import PriceStrategy, ResourceId
from batch_plane.orchestrator.compute.commands import SubmitJobCommand
from batch_plane.orchestrator.compute.use_cases import SubmitJobUseCase

TEMPLATE = ResourceId("JobDefinition")
QUEUE = ResourceId("JobQueue")


class TestSubmitJobUseCase:
    """Tests for SubmitJobUseCase."""

    def test_places_in_first_tier(self, starter_graph, submission_id_generator, capacity_usage):
        """An idle queue places work in the priority-1 tier."""
        usage = capacity_usage()
        use_case = SubmitJobUseCase(starter_graph, usage, submission_id_generator)

        response = use_case.execute(SubmitJobCommand(TEMPLATE, QUEUE, {"MyParam": "hello"}))

        assert response.placement_state == "PLACED"
        assert response.tier_id == "ComputeEnvironmentHigh"
        assert response.command == ("hello",)
        assert response.template_name == "MyTask"
        assert response.template_revision == 1
        assert response.queue_name == "MyQueue"
        assert response.timeout_seconds == 600
        assert response.submission_id == "018e1234-5678-7abc-9def-123456789001"
        assert sorted(usage.queried) == ["ComputeEnvironmentDefault", "ComputeEnvironmentHigh"]

    def test_default_parameter(self, starter_graph, submission_id_generator, capacity_usage):
        """Unset parameters use the template default."""
        response = SubmitJobUseCase(
            starter_graph, capacity_usage(), submission_id_generator
        ).execute(SubmitJobCommand(TEMPLATE, QUEUE))

        assert response.command == ("",)

    def test_overflow_to_second_tier(self, starter_graph, submission_id_generator, capacity_usage):
        """A full priority-1 tier overflows to priority 2."""
        usage = capacity_usage({"ComputeEnvironmentHigh": 8})

        response = SubmitJobUseCase(starter_graph, usage, submission_id_generator).execute(
            SubmitJobCommand(TEMPLATE, QUEUE)
        )

        assert response.tier_id == "ComputeEnvironmentDefault"

    def test_queued_when_full(self, starter_graph, submission_id_generator, capacity_usage):
        """With every tier full the submission waits."""
        usage = capacity_usage({"ComputeEnvironmentHigh": 8, "ComputeEnvironmentDefault": 1})

        response = SubmitJobUseCase(starter_graph, usage, submission_id_generator).execute(
            SubmitJobCommand(TEMPLATE, QUEUE)
        )

        assert response.placement_state == "QUEUED"
        assert response.tier_id is None

    def test_unknown_parameter(self, starter_graph, submission_id_generator, capacity_usage):
        """Undeclared parameters are rejected."""
        use_case = SubmitJobUseCase(starter_graph, capacity_usage(), submission_id_generator)

        with pytest.raises(ValidationError, match="Unknown parameters"):
            use_case.execute(SubmitJobCommand(TEMPLATE, QUEUE, {"Nope": "x"}))

    def test_unknown_template(self, starter_graph, submission_id_generator, capacity_usage):
        """Submitting an undeclared template fails."""
        use_case = SubmitJobUseCase(starter_graph, capacity_usage(), submission_id_generator)

        with pytest.raises(ReferentialIntegrityError):
            use_case.execute(SubmitJobCommand(ResourceId("Missing"), QUEUE))

    def test_queue_id_of_wrong_kind(self, starter_graph, submission_id_generator, capacity_usage):
        """A queue id must name a queue."""
        use_case = SubmitJobUseCase(starter_graph, capacity_usage(), submission_id_generator)

        with pytest.raises(ReferentialIntegrityError, match="DispatchQueue"):
            use_case.execute(SubmitJobCommand(TEMPLATE, ResourceId("ComputeEnvironmentHigh")))


def _single_tier_graph(vcpus, enabled_queue=True):
    """Graph with one 1-vCPU c5.large tier and a template of the given size."""
    perimeter = NetworkPerimeter.create(ResourceId("VPC"), "net", "10.0.0.0/16")
    tier = CapacityTier.create(
        resource_id=ResourceId("Tiny"),
        name="Tiny",
        price_strategy=PriceStrategy.SPOT,
        max_size=1,
        perimeter_id=perimeter.resource_id,
        instance_types=["c5.large"],
        bid_percentage=100,
    )
    queue = DispatchQueue.create(QUEUE, "q", [(tier, 1)], enabled=enabled_queue)
    template = JobTemplate.create(
        TEMPLATE,
        "Big",
        ImageSource.external("busybox:latest"),
        vcpus=vcpus,
        memory_mib=1024,
        command=["run"],
        timeout_seconds=60,
        read_only_root_filesystem=False,
        inject_secrets=False,
    )
    graph = ResourceGraph()
    for resource in (perimeter, tier, queue, template):
        graph.add(resource)
    return graph


class TestSubmitJobFailFast:
    """Tests for checks that run before a submission id is issued."""

    def test_unsatisfiable_reservation(self, submission_id_generator, capacity_usage):
        """A 4-vCPU job on a 1-vCPU c5.large tier fails at submission."""
        use_case = SubmitJobUseCase(
            _single_tier_graph(vcpus=4), capacity_usage(), submission_id_generator
        )

        with pytest.raises(UnsatisfiableReservationError) as exc_info:
            use_case.execute(SubmitJobCommand(TEMPLATE, QUEUE))
        assert exc_info.value.vcpus == 4
        assert submission_id_generator.generate().value.endswith("001")

    def test_disabled_queue(self, submission_id_generator, capacity_usage):
        """Disabled queues accept no submissions."""
        use_case = SubmitJobUseCase(
            _single_tier_graph(vcpus=1, enabled_queue=False),
            capacity_usage(),
            submission_id_generator,
        )

        with pytest.raises(ValidationError, match="disabled"):
            use_case.execute(SubmitJobCommand(TEMPLATE, QUEUE))

    def test_command_is_frozen(self):
        """Commands are immutable."""
        command = SubmitJobCommand(TEMPLATE, QUEUE)
        with pytest.raises(dataclasses.FrozenInstanceError):
            command.queue_id = ResourceId("Other")
