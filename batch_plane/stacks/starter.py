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

"""Reference spot batch stack.

One image repository, one job template, a public-subnet perimeter that
admits SSH from anywhere, two spot tiers at different price points and a
queue that prefers the wider, cheaper tier.
"""

import logging
import sys
from typing import Dict, Optional, Tuple

import click

from batch_plane import __version__
from batch_plane.core.compute.entities import (
    BlockDevice,
    CapacityTier,
    CredentialVault,
    DispatchQueue,
    ExecutionIdentity,
    ImageRepository,
    JobTemplate,
    LaunchTemplate,
    NetworkPerimeter,
)
from batch_plane.core.compute.exceptions import BatchPlaneDomainError
from batch_plane.core.compute.graph import ResourceGraph
from batch_plane.core.compute.ports import Provisioner
from batch_plane.core.compute.value_objects import (
    EnvironmentTarget,
    InboundRule,
    Permission,
    PriceStrategy,
    ResourceId,
    SecretBinding,
)
from batch_plane.infra.capacity_usage import SnapshotCapacityUsage
from batch_plane.infra.declarations import load_declarations
from batch_plane.infra.exceptions import DeclarationError, ProvisionerError
from batch_plane.infra.file_provisioner import FileSystemProvisioner
from batch_plane.infra.http_provisioner import HttpProvisioner
from batch_plane.infra.id_generator import SequencedSubmissionIds
from batch_plane.infra.log_setup import configure_logging
from batch_plane.infra.settings import Settings
from batch_plane.orchestrator.compute.commands import CompileGraphCommand, SubmitJobCommand
from batch_plane.orchestrator.compute.use_cases import CompileGraphUseCase, SubmitJobUseCase

logger = logging.getLogger(__name__)

STACK_NAME = "BatchStack"
DEFAULT_ENVIRONMENT = EnvironmentTarget(account="884515231596", region="eu-central-1")
LAUNCH_TEMPLATE_NAME = "increase-volume-size"


def build_starter_stack(environment: EnvironmentTarget) -> ResourceGraph:
    """Declare the reference stack for an environment.

    Args:
        environment: Account and region the stack is declared for.

    Returns:
        ResourceGraph with every resource of the stack.
    """
    graph = ResourceGraph(name=STACK_NAME)
    vault = graph.add_vault(CredentialVault(environment))

    repo = graph.add(ImageRepository(
        resource_id=ResourceId("Repo"),
        repository_name="robofarm/aws-batch-starter",
        max_image_count=5,
    ))
    secret = vault.create_secret(ResourceId("MySecret"), "MySecret")
    role = graph.add(ExecutionIdentity.create(
        resource_id=ResourceId("JobExecutionRole"),
        role_name="MyTaskExecutionRole",
        environment=environment,
        permissions=[Permission.EMIT_LOGS, Permission.PULL_IMAGE, Permission.READ_SECRETS],
        vault=vault,
        secrets=[secret],
        repositories=[repo],
    ))
    graph.add(JobTemplate.create(
        ResourceId("JobDefinition"),
        "MyTask",
        repo.image("latest"),
        vcpus=1,
        memory_mib=512,
        command=["Ref::MyParam"],
        timeout_seconds=10 * 60,
        read_only_root_filesystem=True,
        inject_secrets=True,
        parameters={"MyParam": ""},
        secret_bindings=[SecretBinding("MySecret", secret)],
        execution_identity=role,
    ))

    perimeter = graph.add(NetworkPerimeter.create(
        resource_id=ResourceId("VPC"),
        name="BatchStackStarterSecurityGroup",
        cidr="10.0.0.0/16",
        allowed_inbound=[InboundRule.tcp(22, description="SSH from anywhere")],
        max_availability_zones=4,
    ))
    launch_template = graph.add(LaunchTemplate(
        resource_id=ResourceId("LaunchTemplate"),
        name=LAUNCH_TEMPLATE_NAME,
        block_devices=(BlockDevice("/dev/xvda", volume_size_gib=100, volume_type="gp2"),),
    ))

    # Scale out wider when the spot market is cheap.
    high = graph.add(CapacityTier.create(
        resource_id=ResourceId("ComputeEnvironmentHigh"),
        name="HighCapacity",
        price_strategy=PriceStrategy.SPOT,
        max_size=8,
        perimeter_id=perimeter.resource_id,
        bid_percentage=75,
        launch_template_id=launch_template.resource_id,
    ))
    default = graph.add(CapacityTier.create(
        resource_id=ResourceId("ComputeEnvironmentDefault"),
        name="DefaultCapacity",
        price_strategy=PriceStrategy.SPOT,
        max_size=1,
        perimeter_id=perimeter.resource_id,
        bid_percentage=100,
        launch_template_id=launch_template.resource_id,
    ))
    graph.add(DispatchQueue.create(
        resource_id=ResourceId("JobQueue"),
        name="MyQueue",
        tiers=[(high, 1), (default, 2)],
    ))
    logger.debug("Declared %s for %s", STACK_NAME, environment)
    return graph


def _provisioner(settings: Settings) -> Provisioner:
    if settings.provisioner_url:
        return HttpProvisioner(settings.provisioner_url, timeout=settings.provisioner_timeout)
    return FileSystemProvisioner(settings.output_dir)


def _environment(settings: Settings) -> EnvironmentTarget:
    if settings.account or settings.region:
        return settings.environment()
    return DEFAULT_ENVIRONMENT


@click.command()
@click.version_option(version=__version__, prog_name="batch-plane")
@click.option(
    "--declarations",
    "declarations",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML declaration file; the reference stack is used when omitted.",
)
@click.option("--stack-name", default=STACK_NAME, show_default=True, help="Deployment name.")
def main(declarations: Optional[str], stack_name: str) -> None:
    """Compile a stack and hand it to the configured provisioner.

    Writes a template to BATCH_PLANE_OUTPUT_DIR unless
    BATCH_PLANE_PROVISIONER_URL points at a reconciliation service.
    """
    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        provisioner = _provisioner(settings)
        environment = _environment(settings)
        graph = (
            load_declarations(declarations, environment)
            if declarations
            else build_starter_stack(environment)
        )
        response = CompileGraphUseCase(provisioner).execute(
            CompileGraphCommand(stack_name=stack_name, graph=graph, environment=environment)
        )
    except (BatchPlaneDomainError, DeclarationError, ProvisionerError, ValueError) as exc:
        click.echo(f"✗ {exc}", err=True)
        sys.exit(1)

    if not response.succeeded:
        for resource_id, message in response.diagnostics:
            click.echo(f"✗ {resource_id or stack_name}: {message}", err=True)
        sys.exit(1)
    click.echo(
        f"✓ {response.stack_name}: {response.resource_count} resources "
        f"for {response.account}/{response.region}"
        + (f" -> {response.location}" if response.location else "")
    )


def _assignments(ctx, param, values: Tuple[str, ...]) -> Dict[str, str]:
    parameters = {}
    for value in values:
        name, sep, text = value.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"{value!r} must look like NAME=VALUE")
        parameters[name] = text
    return parameters


def _usage(ctx, param, values: Tuple[str, ...]) -> SnapshotCapacityUsage:
    try:
        return SnapshotCapacityUsage.parse(values)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


@click.command()
@click.version_option(version=__version__, prog_name="batch-plane")
@click.argument("template_id")
@click.argument("queue_id")
@click.option(
    "--declarations",
    "declarations",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML declaration file; the reference stack is used when omitted.",
)
@click.option(
    "--param",
    "parameters",
    multiple=True,
    callback=_assignments,
    help="Parameter override as NAME=VALUE; repeatable.",
)
@click.option(
    "--used",
    "usage",
    multiple=True,
    callback=_usage,
    help="vCPUs already in use in a tier as TIER=VCPUS; repeatable.",
)
def submit(
    template_id: str,
    queue_id: str,
    declarations: Optional[str],
    parameters: Dict[str, str],
    usage: SnapshotCapacityUsage,
) -> None:
    """Decide where one run of TEMPLATE_ID submitted to QUEUE_ID lands.

    Tiers not named with --used are treated as idle.
    """
    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        environment = _environment(settings)
        graph = (
            load_declarations(declarations, environment)
            if declarations
            else build_starter_stack(environment)
        )
        response = SubmitJobUseCase(graph, usage, SequencedSubmissionIds()).execute(
            SubmitJobCommand(ResourceId(template_id), ResourceId(queue_id), parameters)
        )
    except (BatchPlaneDomainError, DeclarationError, ValueError) as exc:
        click.echo(f"✗ {exc}", err=True)
        sys.exit(1)

    where = f"in {response.tier_id}" if response.tier_id else "until capacity frees up"
    click.echo(
        f"✓ {response.submission_id}: {response.template_name}:{response.template_revision} "
        f"{response.placement_state.lower()} on {response.queue_name} {where}"
    )
    click.echo(f"  command: {' '.join(response.command)}")


if __name__ == "__main__":
    main()
