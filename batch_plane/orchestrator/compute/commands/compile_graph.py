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

"""CompileGraph command DTO."""

from dataclasses import dataclass

from batch_plane.core.compute.graph import ResourceGraph
from batch_plane.core.compute.value_objects import EnvironmentTarget


@dataclass(frozen=True)
class CompileGraphCommand:
    """Command to compile a declared graph and hand it to the provisioner.

    Attributes:
        stack_name: Deployment name passed to the provisioner.
        graph: Declared resources.
        environment: Explicit target environment.
    """

    stack_name: str
    graph: ResourceGraph
    environment: EnvironmentTarget
