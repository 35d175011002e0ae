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

"""Resource graph aggregate.

Resources are registered under explicit, caller-assigned ids. The graph
checks that ids and reserved physical names are unique, that every
reference resolves, and renders the whole declaration for one environment.
"""

import logging
from typing import Dict, List, Optional, Tuple, Type, TypeVar, Union

from .entities import (
    CapacityTier,
    CredentialVault,
    DispatchQueue,
    ExecutionIdentity,
    ImageRepository,
    JobTemplate,
    LaunchTemplate,
    NetworkPerimeter,
    VaultSecret,
)
from .exceptions import DuplicateResourceError, ReferentialIntegrityError, ValidationError
from .overrides import PostRenderTransform, SecretInjectionOverride
from .rendered import RenderedGraph
from .rendering import GraphRenderer
from .value_objects import EnvironmentTarget, Permission, ResourceId, SecretReference

logger = logging.getLogger(__name__)

Resource = Union[
    ImageRepository,
    VaultSecret,
    ExecutionIdentity,
    JobTemplate,
    LaunchTemplate,
    NetworkPerimeter,
    CapacityTier,
    DispatchQueue,
]

DECLARABLE = (
    ImageRepository,
    ExecutionIdentity,
    JobTemplate,
    LaunchTemplate,
    NetworkPerimeter,
    CapacityTier,
    DispatchQueue,
)

R = TypeVar("R")


class ResourceGraph:
    """Declared resources of one deployment.

    Attributes:
        name: Deployment name, used for log context.
    """

    def __init__(self, name: str = "default") -> None:
        self.name = name
        self._declared: Dict[str, Resource] = {}
        self._vaults: List[CredentialVault] = []

    def add(self, resource: Resource) -> Resource:
        """Register a resource under its own logical id.

        Returns:
            The resource, for chaining.

        Raises:
            ValidationError: If the object is not a declarable resource.
            DuplicateResourceError: If the id or reserved name is taken.
        """
        if not isinstance(resource, DECLARABLE):
            raise ValidationError(f"Cannot declare {type(resource).__name__} in a graph")
        self._check_unique(resource, self._index())
        self._declared[str(resource.resource_id)] = resource
        return resource

    def add_vault(self, vault: CredentialVault) -> CredentialVault:
        """Register a vault; its secrets become graph resources."""
        if any(existing is vault for existing in self._vaults):
            return vault
        self._vaults.append(vault)
        try:
            self._index()
        except DuplicateResourceError:
            self._vaults.remove(vault)
            raise
        return vault

    def vaults(self) -> List[CredentialVault]:
        return list(self._vaults)

    def resources(self) -> List[Resource]:
        """Return all resources, vault secrets first, then declaration order."""
        return list(self._index().values())

    def get(self, resource_id: ResourceId, kind: Type[R], holder: str = "graph") -> R:
        """Return a resource of the given kind.

        Raises:
            ReferentialIntegrityError: If no resource of that kind has the id.
        """
        resource = self._index().get(str(resource_id))
        if not isinstance(resource, kind):
            raise ReferentialIntegrityError(
                holder,
                str(resource_id),
                reason=f"is not a declared {kind.__name__}",
            )
        return resource

    def _index(self) -> Dict[str, Resource]:
        index: Dict[str, Resource] = {}
        names: Dict[Tuple[str, str], str] = {}
        secrets = [s for vault in self._vaults for s in vault.secrets()]
        for resource in [*secrets, *self._declared.values()]:
            self._check_unique(resource, index, names)
            index[str(resource.resource_id)] = resource
            names[(type(resource).__name__, resource.physical_name)] = str(resource.resource_id)
        return index

    @staticmethod
    def _check_unique(
        resource: Resource,
        index: Dict[str, Resource],
        names: Optional[Dict[Tuple[str, str], str]] = None,
    ) -> None:
        rid = str(resource.resource_id)
        if rid in index:
            raise DuplicateResourceError(rid, rid)
        if names is None:
            names = {
                (type(r).__name__, r.physical_name): str(r.resource_id)
                for r in index.values()
            }
        if (type(resource).__name__, resource.physical_name) in names:
            raise DuplicateResourceError(rid, resource.physical_name)

    def validate(self, environment: EnvironmentTarget) -> None:
        """Check that every reference resolves for the target environment.

        Raises:
            DuplicateResourceError: If ids or reserved names collide.
            ReferentialIntegrityError: If a reference dangles or mismatches.
        """
        index = self._index()
        for vault in self._vaults:
            if vault.environment != environment:
                raise ReferentialIntegrityError(
                    "vault",
                    str(vault.environment),
                    reason=f"is not the target environment {environment}",
                )
        for resource in index.values():
            if isinstance(resource, ExecutionIdentity):
                self._validate_identity(resource, environment)
            elif isinstance(resource, JobTemplate):
                self._validate_template(resource)
            elif isinstance(resource, CapacityTier):
                self._validate_tier(resource)
            elif isinstance(resource, DispatchQueue):
                self._validate_queue(resource)
        logger.debug("Graph %s validated (%d resources)", self.name, len(index))

    def _validate_identity(self, identity: ExecutionIdentity, environment: EnvironmentTarget) -> None:
        rid = str(identity.resource_id)
        if identity.environment != environment:
            raise ReferentialIntegrityError(
                rid,
                str(identity.environment),
                reason=f"is not the target environment {environment}",
            )
        for repository_id in identity.pullable_repositories:
            self.get(repository_id, ImageRepository, holder=rid)
        for secret in identity.readable_secrets:
            self._require_secret(rid, secret)

    def _require_secret(self, holder: str, secret: SecretReference) -> None:
        if not any(vault.contains(secret) for vault in self._vaults):
            raise ReferentialIntegrityError(holder, str(secret.secret_id))

    def _validate_template(self, template: JobTemplate) -> None:
        rid = str(template.resource_id)
        identity = template.execution_identity
        if template.image.repository_id is not None:
            self.get(template.image.repository_id, ImageRepository, holder=rid)
        if identity is None:
            return
        declared = self.get(identity.resource_id, ExecutionIdentity, holder=rid)
        if declared != identity:
            raise ReferentialIntegrityError(
                rid,
                str(identity.resource_id),
                reason="differs from the declared identity with that id",
            )
        repository_id = template.image.repository_id
        if repository_id is not None and (
            Permission.PULL_IMAGE not in identity.permissions
            or repository_id not in identity.pullable_repositories
        ):
            raise ReferentialIntegrityError(
                rid,
                str(repository_id),
                reason=f"is not pullable by {identity.resource_id}",
            )
        for binding in template.secret_bindings:
            self._require_secret(rid, binding.secret)
            readable = identity.can_read(binding.secret) and any(
                vault.can_read(identity.resource_id, binding.secret)
                for vault in self._vaults
            )
            if not readable:
                raise ReferentialIntegrityError(
                    rid,
                    str(binding.secret.secret_id),
                    reason=f"is not readable by {identity.resource_id}",
                )

    def _validate_tier(self, tier: CapacityTier) -> None:
        rid = str(tier.resource_id)
        self.get(tier.perimeter_id, NetworkPerimeter, holder=rid)
        if tier.launch_template_id is not None:
            self.get(tier.launch_template_id, LaunchTemplate, holder=rid)

    def _validate_queue(self, queue: DispatchQueue) -> None:
        rid = str(queue.resource_id)
        for assignment in queue.tiers:
            declared = self.get(assignment.tier.resource_id, CapacityTier, holder=rid)
            if declared != assignment.tier:
                raise ReferentialIntegrityError(
                    rid,
                    str(assignment.tier.resource_id),
                    reason="differs from the declared tier with that id",
                )

    def render(self, environment: EnvironmentTarget) -> RenderedGraph:
        """Validate and render every resource for the target environment.

        Raises:
            DuplicateResourceError: If rendered ids collide.
            ReferentialIntegrityError: If the graph does not validate.
        """
        self.validate(environment)
        index = self._index()
        renderer = GraphRenderer(environment, index.__getitem__)
        rendered = RenderedGraph(environment=environment)
        for resource in index.values():
            for item in renderer.render(resource):
                rendered.add(item)
        logger.info(
            "Rendered graph %s for %s: %d resources",
            self.name,
            environment,
            len(rendered.resources),
        )
        return rendered

    def post_render_transforms(self) -> List[PostRenderTransform]:
        """Return the overrides the declared templates need."""
        transforms: List[PostRenderTransform] = []
        for resource in self._index().values():
            if isinstance(resource, JobTemplate):
                override = SecretInjectionOverride.for_template(resource)
                if override is not None:
                    transforms.append(override)
        return transforms
