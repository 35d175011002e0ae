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

"""Shared fixtures for compute domain tests."""

import pytest

from batch_plane.core.compute.entities import (
    CapacityTier,
    DispatchQueue,
    ExecutionIdentity,
    ImageRepository,
    JobTemplate,
    LaunchTemplate,
    NetworkPerimeter,
)
from batch_plane.core.compute.graph import ResourceGraph
from batch_plane.core.compute.value_objects import (
    InboundRule,
    Permission,
    PriceStrategy,
    ResourceId,
    SecretBinding,
)


@pytest.fixture
def repository():
    """Image repository for the job image."""
    return ImageRepository(ResourceId("Repo"), "robofarm/aws-batch-starter")


@pytest.fixture
def perimeter():
    """Perimeter admitting SSH from anywhere."""
    return NetworkPerimeter.create(
        resource_id=ResourceId("VPC"),
        name="batch-perimeter",
        cidr="10.0.0.0/16",
        allowed_inbound=[InboundRule.tcp(22, description="SSH from anywhere")],
    )


@pytest.fixture
def launch_template():
    """Launch template with the default 100 GiB root volume."""
    return LaunchTemplate(ResourceId("LaunchTemplate"), "increase-volume-size")


@pytest.fixture
def high_tier(perimeter, launch_template):
    """Wide tier at 75 percent of the on-demand price."""
    return CapacityTier.create(
        resource_id=ResourceId("High"),
        name="HighCapacity",
        price_strategy=PriceStrategy.SPOT,
        max_size=8,
        perimeter_id=perimeter.resource_id,
        bid_percentage=75,
        launch_template_id=launch_template.resource_id,
    )


@pytest.fixture
def default_tier(perimeter, launch_template):
    """Narrow tier at the full on-demand price."""
    return CapacityTier.create(
        resource_id=ResourceId("Default"),
        name="DefaultCapacity",
        price_strategy=PriceStrategy.SPOT,
        max_size=1,
        perimeter_id=perimeter.resource_id,
        bid_percentage=100,
        launch_template_id=launch_template.resource_id,
    )


@pytest.fixture
def queue(high_tier, default_tier):
    """Queue preferring the high tier."""
    return DispatchQueue.create(
        resource_id=ResourceId("JobQueue"),
        name="MyQueue",
        tiers=[(high_tier, 1), (default_tier, 2)],
    )


@pytest.fixture
def secret(vault):
    """Secret declared in the shared vault."""
    return vault.create_secret(ResourceId("MySecret"), "MySecret")


@pytest.fixture
def identity(environment, vault, secret, repository):
    """Identity allowed to log, pull from the repository and read the secret."""
    return ExecutionIdentity.create(
        resource_id=ResourceId("JobRole"),
        role_name="job-role",
        environment=environment,
        permissions=[Permission.EMIT_LOGS, Permission.PULL_IMAGE, Permission.READ_SECRETS],
        vault=vault,
        secrets=[secret],
        repositories=[repository],
    )


@pytest.fixture
def template(repository, identity, secret):
    """Read-only template injecting one secret."""
    return JobTemplate.create(
        ResourceId("JobDefinition"),
        "MyTask",
        repository.image("latest"),
        vcpus=1,
        memory_mib=512,
        command=["Ref::MyParam"],
        timeout_seconds=600,
        read_only_root_filesystem=True,
        inject_secrets=True,
        parameters={"MyParam": ""},
        secret_bindings=[SecretBinding("DB_PASSWORD", secret)],
        execution_identity=identity,
    )


@pytest.fixture
def graph(
    vault,
    repository,
    identity,
    template,
    perimeter,
    launch_template,
    high_tier,
    default_tier,
    queue,
):
    """Graph holding one of everything."""
    resource_graph = ResourceGraph(name="test")
    resource_graph.add_vault(vault)
    for resource in (
        repository,
        identity,
        template,
        perimeter,
        launch_template,
        high_tier,
        default_tier,
        queue,
    ):
        resource_graph.add(resource)
    return resource_graph
