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

"""Execution identity entity."""

import re
from dataclasses import dataclass
from typing import ClassVar, FrozenSet, Iterable, Optional, Tuple

from ..exceptions import ReferentialIntegrityError, ValidationError
from ..ports import SecretStore
from ..value_objects import EnvironmentTarget, Permission, ResourceId, SecretReference
from .image_source import ImageRepository

JOB_EXECUTION_PRINCIPAL = "ecs-tasks.amazonaws.com"

ALLOWED_PERMISSIONS: FrozenSet[Permission] = frozenset(Permission)


@dataclass(frozen=True)
class ExecutionIdentity:
    """Minimal-permission role the substrate assumes to start a job.

    The permission set is composed once, at construction. Templates that
    share an identity only reference it.

    Attributes:
        resource_id: Logical id of the identity.
        role_name: Physical role name.
        environment: Environment the role lives in.
        permissions: Granted permissions, a subset of ``Permission``.
        readable_secrets: Secrets the role may read.
        pullable_repositories: Repositories the role may pull from.
        log_group: Log group the role may write to.
        principal: Service principal allowed to assume the role.
    """

    resource_id: ResourceId
    role_name: str
    environment: EnvironmentTarget
    permissions: FrozenSet[Permission]
    readable_secrets: Tuple[SecretReference, ...] = ()
    pullable_repositories: Tuple[ResourceId, ...] = ()
    log_group: str = "/aws/batch/job"
    principal: str = JOB_EXECUTION_PRINCIPAL

    ROLE_NAME_PATTERN: ClassVar[str] = r'^[A-Za-z0-9+=,.@_-]{1,64}$'

    def __post_init__(self) -> None:
        """Validate the permission set against the closed allowed set."""
        rid = str(self.resource_id)
        if not re.match(self.ROLE_NAME_PATTERN, self.role_name or ""):
            raise ValidationError(f"Invalid role name: {self.role_name!r}", resource_id=rid)
        if self.principal != JOB_EXECUTION_PRINCIPAL:
            raise ValidationError(
                f"Execution identity can only be assumed by {JOB_EXECUTION_PRINCIPAL}",
                resource_id=rid,
            )
        try:
            permissions = frozenset(Permission(p) for p in self.permissions)
        except ValueError as exc:
            raise ValidationError(
                f"Permissions {sorted(map(str, self.permissions))} exceed allowed set "
                f"{sorted(p.value for p in ALLOWED_PERMISSIONS)}",
                resource_id=rid,
            ) from exc
        object.__setattr__(self, "permissions", permissions)
        if self.readable_secrets and Permission.READ_SECRETS not in permissions:
            raise ValidationError(
                "Readable secrets declared without read-secrets permission",
                resource_id=rid,
            )
        if self.pullable_repositories and Permission.PULL_IMAGE not in permissions:
            raise ValidationError(
                "Pullable repositories declared without pull-image permission",
                resource_id=rid,
            )

    @classmethod
    def create(
        cls,
        resource_id: ResourceId,
        role_name: str,
        environment: EnvironmentTarget,
        permissions: Iterable[Permission],
        vault: Optional[SecretStore] = None,
        secrets: Iterable[SecretReference] = (),
        repositories: Iterable[ImageRepository] = (),
        log_group: str = "/aws/batch/job",
    ) -> "ExecutionIdentity":
        """Build an identity and register its read grants with the vault.

        Args:
            resource_id: Logical id of the identity.
            role_name: Physical role name.
            environment: Environment the role lives in.
            permissions: Requested permissions.
            vault: Vault holding ``secrets``; required when secrets are given.
            secrets: Secrets the role needs to read.
            repositories: Declared repositories the role pulls from.
            log_group: Log group the role writes to.

        Returns:
            The constructed ExecutionIdentity.

        Raises:
            ValidationError: If permissions or inputs are inconsistent.
            ReferentialIntegrityError: If a secret is not in the vault.
        """
        secrets = tuple(secrets)
        if secrets and vault is None:
            raise ValidationError(
                "A vault is required to grant secret reads",
                resource_id=str(resource_id),
            )
        if vault is not None and vault.environment != environment:
            raise ValidationError(
                f"Vault environment {vault.environment} does not match {environment}",
                resource_id=str(resource_id),
            )
        identity = cls(
            resource_id=resource_id,
            role_name=role_name,
            environment=environment,
            permissions=frozenset(permissions),
            readable_secrets=secrets,
            pullable_repositories=tuple(r.resource_id for r in repositories),
            log_group=log_group,
        )
        missing = [s for s in secrets if not vault.contains(s)]
        if missing:
            raise ReferentialIntegrityError(
                str(resource_id),
                str(missing[0].secret_id),
                reason="is not a secret in the vault",
            )
        for secret in secrets:
            vault.grant_read(resource_id, secret)
        return identity

    @property
    def physical_name(self) -> str:
        return self.role_name

    @property
    def arn(self) -> str:
        """ARN-equivalent of the role."""
        return self.environment.iam_arn(f"role/{self.role_name}")

    def can_read(self, secret: SecretReference) -> bool:
        """Check if the identity may read a secret (any key of it)."""
        return Permission.READ_SECRETS in self.permissions and any(
            s.secret_id == secret.secret_id for s in self.readable_secrets
        )
