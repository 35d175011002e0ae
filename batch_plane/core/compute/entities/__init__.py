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

"""Compute domain entities."""

from .capacity_tier import CapacityTier
from .credential_vault import CredentialVault, VaultSecret
from .dispatch_queue import DispatchQueue, Placement, TierAssignment
from .execution_identity import ExecutionIdentity
from .image_source import ImageRepository, ImageSource
from .job_template import JobTemplate
from .launch_template import BlockDevice, LaunchTemplate
from .network_perimeter import NetworkPerimeter

__all__ = [
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
]
