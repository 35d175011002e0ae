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

"""SubmitJob command DTO."""

from dataclasses import dataclass, field
from typing import Dict

from batch_plane.core.compute.value_objects import ResourceId


@dataclass(frozen=True)
class SubmitJobCommand:
    """Command to submit one job instance to a dispatch queue.

    Attributes:
        template_id: Job template to run.
        queue_id: Dispatch queue to submit to.
        parameters: Parameter values overriding template defaults.
    """

    template_id: ResourceId
    queue_id: ResourceId
    parameters: Dict[str, str] = field(default_factory=dict)
