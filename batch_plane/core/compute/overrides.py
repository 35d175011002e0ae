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

"""Post-render transforms.

This is the only module that edits rendered resource properties. Every
transform checks the shape it is about to patch and raises
``UnsupportedOverrideError`` instead of writing into a structure it does
not recognize.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, MutableMapping, Optional, Protocol, Tuple

from .entities import ExecutionIdentity, JobTemplate
from .exceptions import ReferentialIntegrityError, UnsupportedOverrideError
from .rendered import RenderedGraph, RenderedResource
from .rendering import JOB_DEFINITION_TYPE
from .value_objects import ResourceId, SecretBinding

logger = logging.getLogger(__name__)

SECRET_ENTRY_KEYS = frozenset({"Name", "ValueFrom"})


class PostRenderTransform(Protocol):
    """Narrow interface for patching one rendered resource."""

    @property
    def target(self) -> ResourceId:
        """Logical id of the resource the transform patches."""
        ...

    def apply(self, rendered: RenderedResource) -> None:
        """Patch the rendered resource in place.

        Raises:
            UnsupportedOverrideError: If the rendered shape is unexpected.
        """
        ...


@dataclass(frozen=True)
class SecretInjectionOverride:
    """Adds secrets and the execution role to a rendered job definition.

    Applying the override again with the same inputs leaves the rendered
    properties unchanged.

    Attributes:
        target: Logical id of the job template.
        bindings: Secrets to inject as environment variables.
        identity: Execution identity the container runs under.
    """

    target: ResourceId
    bindings: Tuple[SecretBinding, ...]
    identity: ExecutionIdentity

    @classmethod
    def for_template(cls, template: JobTemplate) -> Optional["SecretInjectionOverride"]:
        """Build the override a template needs, or None if it needs none."""
        if template.execution_identity is None:
            return None
        bindings = template.secret_bindings if template.inject_secrets else ()
        return cls(
            target=template.resource_id,
            bindings=tuple(bindings),
            identity=template.execution_identity,
        )

    def apply(self, rendered: RenderedResource) -> None:
        """Set the execution role and merge secret entries.

        Raises:
            UnsupportedOverrideError: If the rendered job definition does not
                have the expected shape or conflicts with these inputs.
        """
        container = self._container_properties(rendered)
        self._set_execution_role(rendered, container)
        if self.bindings:
            self._merge_secrets(rendered, container)
        logger.debug(
            "Applied secret injection to %s (%d secrets)",
            rendered.logical_id,
            len(self.bindings),
        )

    def _fail(self, rendered: RenderedResource, path: str, reason: str) -> None:
        raise UnsupportedOverrideError(rendered.logical_id, path, reason)

    def _container_properties(self, rendered: RenderedResource) -> MutableMapping[str, Any]:
        if rendered.logical_id != str(self.target):
            self._fail(rendered, "LogicalId", f"expected {self.target}")
        if rendered.type != JOB_DEFINITION_TYPE:
            self._fail(rendered, "Type", f"expected {JOB_DEFINITION_TYPE}, got {rendered.type!r}")
        properties = rendered.properties
        if not isinstance(properties, MutableMapping):
            self._fail(rendered, "Properties", "expected a mapping")
        if properties.get("Type") != "container":
            self._fail(
                rendered,
                "Properties.Type",
                f"expected 'container', got {properties.get('Type')!r}",
            )
        container = properties.get("ContainerProperties")
        if not isinstance(container, MutableMapping):
            self._fail(rendered, "Properties.ContainerProperties", "expected a mapping")
        if not isinstance(container.get("Image"), str):
            self._fail(rendered, "Properties.ContainerProperties.Image", "expected an image string")
        return container

    def _set_execution_role(
        self,
        rendered: RenderedResource,
        container: MutableMapping[str, Any],
    ) -> None:
        current = container.get("ExecutionRoleArn")
        if current is not None and current != self.identity.arn:
            self._fail(
                rendered,
                "Properties.ContainerProperties.ExecutionRoleArn",
                f"already set to {current!r}",
            )
        container["ExecutionRoleArn"] = self.identity.arn
        identity_id = str(self.identity.resource_id)
        if identity_id not in rendered.depends_on:
            rendered.depends_on.append(identity_id)

    def _merge_secrets(
        self,
        rendered: RenderedResource,
        container: MutableMapping[str, Any],
    ) -> None:
        path = "Properties.ContainerProperties.Secrets"
        entries = container.get("Secrets")
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            self._fail(rendered, path, "expected a list")
        existing: Dict[str, str] = {}
        for entry in entries:
            if (
                not isinstance(entry, dict)
                or set(entry) != SECRET_ENTRY_KEYS
                or not all(isinstance(v, str) for v in entry.values())
            ):
                self._fail(rendered, path, f"unexpected entry {entry!r}")
            existing[entry["Name"]] = entry["ValueFrom"]
        merged: List[Dict[str, str]] = list(entries)
        for binding in self.bindings:
            value_from = binding.secret.value_from
            if binding.env_var in existing:
                if existing[binding.env_var] != value_from:
                    self._fail(
                        rendered,
                        f"{path}[{binding.env_var}]",
                        "already bound to a different secret",
                    )
                continue
            merged.append({"Name": binding.env_var, "ValueFrom": value_from})
            existing[binding.env_var] = value_from
        container["Secrets"] = merged


def apply_transforms(
    graph: RenderedGraph,
    transforms: Iterable[PostRenderTransform],
) -> RenderedGraph:
    """Apply transforms to a rendered graph in a deterministic order.

    Raises:
        ReferentialIntegrityError: If a transform targets a missing resource.
        UnsupportedOverrideError: If a transform rejects its target's shape.
    """
    for transform in sorted(transforms, key=lambda t: str(t.target)):
        target = str(transform.target)
        if target not in graph.resources:
            raise ReferentialIntegrityError("post-render", target)
        transform.apply(graph.get(target))
    return graph
