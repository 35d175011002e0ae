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

"""Rendering of declared entities into low-level resource properties.

The renderer emits what the declarative model knows. Job templates are
rendered without secrets or an execution role; those are added afterwards
by the post-render overrides in ``overrides.py``.
"""

import json
from typing import Any, Callable, Dict, List

from .entities import (
    CapacityTier,
    DispatchQueue,
    ExecutionIdentity,
    ImageRepository,
    JobTemplate,
    LaunchTemplate,
    NetworkPerimeter,
    VaultSecret,
)
from .rendered import RenderedResource
from .value_objects import EnvironmentTarget, InboundRule, NetworkProtocol, Permission

JOB_DEFINITION_TYPE = "AWS::Batch::JobDefinition"

PULL_ACTIONS = [
    "ecr:BatchCheckLayerAvailability",
    "ecr:GetDownloadUrlForLayer",
    "ecr:BatchGetImage",
]


def _ref(logical_id: str) -> Dict[str, str]:
    return {"Ref": logical_id}


def perimeter_subnet_ids(perimeter: NetworkPerimeter) -> List[str]:
    return [
        f"{perimeter.resource_id}-public-{index}"
        for index in range(len(perimeter.subnet_blocks()))
    ]


def perimeter_security_group_id(perimeter: NetworkPerimeter) -> str:
    return f"{perimeter.resource_id}-sg"


class GraphRenderer:
    """Renders declared entities for one environment.

    Attributes:
        environment: Environment ARNs and URIs are resolved against.
        lookup: Resolves logical ids of referenced resources.
    """

    def __init__(
        self,
        environment: EnvironmentTarget,
        lookup: Callable[[str], Any],
    ) -> None:
        self.environment = environment
        self._lookup = lookup
        self._renderers: Dict[type, Callable[[Any], List[RenderedResource]]] = {
            ImageRepository: self._render_repository,
            VaultSecret: self._render_secret,
            ExecutionIdentity: self._render_identity,
            JobTemplate: self._render_job_template,
            LaunchTemplate: self._render_launch_template,
            NetworkPerimeter: self._render_perimeter,
            CapacityTier: self._render_tier,
            DispatchQueue: self._render_queue,
        }

    def render(self, resource: Any) -> List[RenderedResource]:
        """Render one entity into one or more low-level resources."""
        return self._renderers[type(resource)](resource)

    def _render_repository(self, repo: ImageRepository) -> List[RenderedResource]:
        lifecycle = {
            "rules": [
                {
                    "rulePriority": 1,
                    "selection": {
                        "tagStatus": "any",
                        "countType": "imageCountMoreThan",
                        "countNumber": repo.max_image_count,
                    },
                    "action": {"type": "expire"},
                }
            ]
        }
        return [
            RenderedResource(
                logical_id=str(repo.resource_id),
                type="AWS::ECR::Repository",
                properties={
                    "RepositoryName": repo.repository_name,
                    "LifecyclePolicy": {
                        "LifecyclePolicyText": json.dumps(lifecycle, sort_keys=True),
                    },
                },
            )
        ]

    def _render_secret(self, secret: VaultSecret) -> List[RenderedResource]:
        properties: Dict[str, Any] = {"Name": secret.secret_name}
        if secret.initial_value is None:
            properties["GenerateSecretString"] = {}
        else:
            properties["SecretString"] = secret.initial_value
        return [
            RenderedResource(
                logical_id=str(secret.resource_id),
                type="AWS::SecretsManager::Secret",
                properties=properties,
            )
        ]

    def _render_identity(self, identity: ExecutionIdentity) -> List[RenderedResource]:
        statements = []
        if Permission.EMIT_LOGS in identity.permissions:
            statements.append({
                "Effect": "Allow",
                "Action": ["logs:CreateLogStream", "logs:PutLogEvents"],
                "Resource": self.environment.arn(
                    "logs", f"log-group:{identity.log_group}:*"
                ),
            })
        if Permission.PULL_IMAGE in identity.permissions:
            statements.append({
                "Effect": "Allow",
                "Action": ["ecr:GetAuthorizationToken"],
                "Resource": "*",
            })
            repos = [self._lookup(str(r)) for r in identity.pullable_repositories]
            if repos:
                statements.append({
                    "Effect": "Allow",
                    "Action": list(PULL_ACTIONS),
                    "Resource": sorted(r.arn(self.environment) for r in repos),
                })
        if Permission.READ_SECRETS in identity.permissions and identity.readable_secrets:
            statements.append({
                "Effect": "Allow",
                "Action": ["secretsmanager:GetSecretValue"],
                "Resource": sorted({s.arn for s in identity.readable_secrets}),
            })
        properties: Dict[str, Any] = {
            "RoleName": identity.role_name,
            "AssumeRolePolicyDocument": {
                "Version": "2012-10-17",
                "Statement": [{
                    "Effect": "Allow",
                    "Principal": {"Service": identity.principal},
                    "Action": "sts:AssumeRole",
                }],
            },
            "Policies": [{
                "PolicyName": f"{identity.role_name}-execution",
                "PolicyDocument": {"Version": "2012-10-17", "Statement": statements},
            }] if statements else [],
        }
        depends_on = [str(r) for r in identity.pullable_repositories]
        depends_on += sorted({str(s.secret_id) for s in identity.readable_secrets})
        return [
            RenderedResource(
                logical_id=str(identity.resource_id),
                type="AWS::IAM::Role",
                properties=properties,
                depends_on=depends_on,
            )
        ]

    def _render_job_template(self, template: JobTemplate) -> List[RenderedResource]:
        depends_on = []
        if template.image.repository_id is not None:
            depends_on.append(str(template.image.repository_id))
        if template.execution_identity is not None:
            depends_on.append(str(template.execution_identity.resource_id))
        return [
            RenderedResource(
                logical_id=str(template.resource_id),
                type=JOB_DEFINITION_TYPE,
                properties={
                    "JobDefinitionName": template.name,
                    "Type": "container",
                    "Parameters": dict(template.parameters),
                    "Timeout": {"AttemptDurationSeconds": template.timeout_seconds},
                    "ContainerProperties": {
                        "Image": template.image.uri(self.environment),
                        "Vcpus": template.reservation.vcpus,
                        "Memory": template.reservation.memory_mib,
                        "Command": list(template.command),
                        "ReadonlyRootFilesystem": template.read_only_root_filesystem,
                    },
                    "Tags": {"revision": str(template.revision)},
                },
                depends_on=depends_on,
            )
        ]

    def _render_launch_template(self, launch: LaunchTemplate) -> List[RenderedResource]:
        return [
            RenderedResource(
                logical_id=str(launch.resource_id),
                type="AWS::EC2::LaunchTemplate",
                properties={
                    "LaunchTemplateName": launch.name,
                    "LaunchTemplateData": {
                        "BlockDeviceMappings": [
                            {
                                "DeviceName": device.device_name,
                                "Ebs": {
                                    "VolumeSize": device.volume_size_gib,
                                    "VolumeType": device.volume_type,
                                },
                            }
                            for device in launch.block_devices
                        ],
                    },
                },
            )
        ]

    def _render_perimeter(self, perimeter: NetworkPerimeter) -> List[RenderedResource]:
        vpc_id = str(perimeter.resource_id)
        rendered = [
            RenderedResource(
                logical_id=vpc_id,
                type="AWS::EC2::VPC",
                properties={
                    "CidrBlock": perimeter.address_block.cidr,
                    "EnableDnsHostnames": True,
                    "EnableDnsSupport": True,
                },
            )
        ]
        for index, (subnet_id, block) in enumerate(
            zip(perimeter_subnet_ids(perimeter), perimeter.subnet_blocks())
        ):
            rendered.append(RenderedResource(
                logical_id=subnet_id,
                type="AWS::EC2::Subnet",
                properties={
                    "VpcId": _ref(vpc_id),
                    "CidrBlock": block,
                    "MapPublicIpOnLaunch": True,
                    "AvailabilityZone": {
                        "Fn::Select": [index, {"Fn::GetAZs": self.environment.region}],
                    },
                },
                depends_on=[vpc_id],
            ))
        rendered.append(RenderedResource(
            logical_id=perimeter_security_group_id(perimeter),
            type="AWS::EC2::SecurityGroup",
            properties={
                "GroupName": perimeter.name,
                "GroupDescription": f"Inbound allow-list for {perimeter.name}",
                "VpcId": _ref(vpc_id),
                "SecurityGroupIngress": [self._ingress(r) for r in perimeter.allowed_inbound],
                "SecurityGroupEgress": [
                    {"IpProtocol": NetworkProtocol.ALL.value, "CidrIp": "0.0.0.0/0"}
                ] if perimeter.allow_all_outbound else [],
            },
            depends_on=[vpc_id],
        ))
        return rendered

    @staticmethod
    def _ingress(rule: InboundRule) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"IpProtocol": rule.protocol.value}
        if ":" in rule.source_cidr:
            entry["CidrIpv6"] = rule.source_cidr
        else:
            entry["CidrIp"] = rule.source_cidr
        if rule.ports is not None:
            entry["FromPort"] = rule.ports.from_port
            entry["ToPort"] = rule.ports.to_port
        if rule.description:
            entry["Description"] = rule.description
        return entry

    def _render_tier(self, tier: CapacityTier) -> List[RenderedResource]:
        perimeter = self._lookup(str(tier.perimeter_id))
        security_group = perimeter_security_group_id(perimeter)
        subnets = perimeter_subnet_ids(perimeter)
        resources: Dict[str, Any] = {
            "Type": tier.price_strategy.value,
            "MinvCpus": tier.min_size,
            "MaxvCpus": tier.max_size,
            "InstanceTypes": list(tier.instance_types) or ["optimal"],
            "Subnets": [_ref(s) for s in subnets],
            "SecurityGroupIds": [{"Fn::GetAtt": [security_group, "GroupId"]}],
        }
        if tier.bid_percentage is not None:
            resources["BidPercentage"] = tier.bid_percentage
        depends_on = [security_group, *subnets]
        if tier.launch_template_id is not None:
            launch = self._lookup(str(tier.launch_template_id))
            resources["LaunchTemplate"] = {"LaunchTemplateName": launch.name}
            depends_on.append(str(launch.resource_id))
        return [
            RenderedResource(
                logical_id=str(tier.resource_id),
                type="AWS::Batch::ComputeEnvironment",
                properties={
                    "ComputeEnvironmentName": tier.name,
                    "Type": "MANAGED",
                    "State": "ENABLED" if tier.enabled else "DISABLED",
                    "ComputeResources": resources,
                },
                depends_on=depends_on,
            )
        ]

    def _render_queue(self, queue: DispatchQueue) -> List[RenderedResource]:
        priorities = {str(a.tier.resource_id): a.priority for a in queue.tiers}
        order = [
            {
                "Order": priorities[str(tier.resource_id)],
                "ComputeEnvironment": _ref(str(tier.resource_id)),
            }
            for tier in queue.ordered_tiers()
        ]
        return [
            RenderedResource(
                logical_id=str(queue.resource_id),
                type="AWS::Batch::JobQueue",
                properties={
                    "JobQueueName": queue.name,
                    "State": "ENABLED" if queue.enabled else "DISABLED",
                    "Priority": 1,
                    "ComputeEnvironmentOrder": order,
                },
                depends_on=[str(a.tier.resource_id) for a in queue.tiers],
            )
        ]
