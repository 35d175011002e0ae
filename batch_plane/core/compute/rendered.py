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

"""Rendered resource documents produced from declared entities."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .exceptions import DuplicateResourceError
from .value_objects import EnvironmentTarget


@dataclass
class RenderedResource:
    """Low-level representation of one resource.

    ``properties`` is deliberately a plain mutable mapping; only
    post-render overrides may change it.
    """

    logical_id: str
    type: str
    properties: Dict[str, Any]
    depends_on: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"Type": self.type, "Properties": self.properties}
        if self.depends_on:
            body["DependsOn"] = sorted(self.depends_on)
        return body


@dataclass
class RenderedGraph:
    """Rendered resources of one environment, keyed by logical id."""

    environment: EnvironmentTarget
    resources: Dict[str, RenderedResource] = field(default_factory=dict)

    def add(self, resource: RenderedResource) -> None:
        if resource.logical_id in self.resources:
            raise DuplicateResourceError(resource.logical_id, resource.logical_id)
        self.resources[resource.logical_id] = resource

    def get(self, logical_id: str) -> RenderedResource:
        return self.resources[logical_id]

    def to_template(self) -> Dict[str, Any]:
        """Return the graph as a template document."""
        return {
            "Environment": {
                "Account": self.environment.account,
                "Region": self.environment.region,
            },
            "Resources": {
                logical_id: resource.to_dict()
                for logical_id, resource in self.resources.items()
            },
        }
