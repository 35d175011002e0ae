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

"""Compute domain module for Batch Plane."""

from .catalog import DEFAULT_CATALOG, InstanceCatalog, InstanceShape
from .entities import (
    BlockDevice,
    CapacityTier,
    CredentialVault,
    DispatchQueue,
    ExecutionIdentity,
    ImageRepository,
    ImageSource,
    JobTemplate,
    LaunchTemplate,
    NetworkPerimeter,
    Placement,
    TierAssignment,
    VaultSecret,
)
from .exceptions import (
    BatchPlaneDomainError,
    DuplicateResourceError,
    ReferentialIntegrityError,
    UnsatisfiableReservationError,
    UnsupportedOverrideError,
    ValidationError,
)
from .graph import ResourceGraph
from .overrides import PostRenderTransform, SecretInjectionOverride, apply_transforms
from .ports import (
    CapacityUsage,
    Diagnostic,
    Provisioner,
    ProvisioningResult,
    SecretStore,
    SubmissionIdGenerator,
)
from .rendered import RenderedGraph, RenderedResource
from .services import ParameterResolver
from .value_objects import (
    AddressBlock,
    EnvironmentTarget,
    ImageReference,
    InboundRule,
    NetworkProtocol,
    Permission,
    PlacementState,
    PortRange,
    PriceStrategy,
    ResourceId,
    ResourceReservation,
    SecretBinding,
    SecretReference,
    SubmissionId,
)

__all__ = [
    "DEFAULT_CATALOG",
    "InstanceCatalog",
    "InstanceShape",
    "BlockDevice",
    "CapacityTier",
    "CredentialVault",
    "DispatchQueue",
    "ExecutionIdentity",
    "ImageRepository",
    "ImageSource",
    "JobTemplate",
    "LaunchTemplate",
    "NetworkPerimeter",
    "Placement",
    "TierAssignment",
    "VaultSecret",
    "BatchPlaneDomainError",
    "DuplicateResourceError",
    "ReferentialIntegrityError",
    "UnsatisfiableReservationError",
    "UnsupportedOverrideError",
    "ValidationError",
    "ResourceGraph",
    "PostRenderTransform",
    "SecretInjectionOverride",
    "apply_transforms",
    "CapacityUsage",
    "Diagnostic",
    "Provisioner",
    "ProvisioningResult",
    "SecretStore",
    "SubmissionIdGenerator",
    "RenderedGraph",
    "RenderedResource",
    "ParameterResolver",
    "AddressBlock",
    "EnvironmentTarget",
    "ImageReference",
    "InboundRule",
    "NetworkProtocol",
    "Permission",
    "PlacementState",
    "PortRange",
    "PriceStrategy",
    "ResourceId",
    "ResourceReservation",
    "SecretBinding",
    "SecretReference",
    "SubmissionId",
]
