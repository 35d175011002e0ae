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

"""Declarative credential vault.

The vault only declares secrets and read grants. Secret values are handed
through to the rendered resource and never read back.
"""

import logging
import re
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional, Set

from ..exceptions import ReferentialIntegrityError, ValidationError
from ..value_objects import EnvironmentTarget, ResourceId, SecretReference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VaultSecret:
    """One secret declared in the vault.

    Attributes:
        resource_id: Logical id of the secret.
        secret_name: Physical secret name.
        arn: ARN-equivalent of the secret.
        initial_value: Initial value, or None to let the substrate generate one.
    """

    resource_id: ResourceId
    secret_name: str
    arn: str
    initial_value: Optional[str] = None

    NAME_PATTERN: ClassVar[str] = r'^[A-Za-z0-9/_+=.@-]{1,512}$'

    def __post_init__(self) -> None:
        if not re.match(self.NAME_PATTERN, self.secret_name or ""):
            raise ValidationError(
                f"Invalid secret name: {self.secret_name!r}",
                resource_id=str(self.resource_id),
            )

    @property
    def physical_name(self) -> str:
        return self.secret_name

    def __repr__(self) -> str:
        return (
            f"VaultSecret(resource_id={self.resource_id!s}, "
            f"secret_name={self.secret_name!r})"
        )


class CredentialVault:
    """Managed secret store bound to one environment.

    Attributes:
        environment: Environment the secrets are created in.
    """

    def __init__(self, environment: EnvironmentTarget) -> None:
        self.environment = environment
        self._secrets: Dict[str, VaultSecret] = {}
        self._grants: Dict[str, Set[str]] = {}

    def create_secret(
        self,
        resource_id: ResourceId,
        secret_name: str,
        initial_value: Optional[str] = None,
        key: Optional[str] = None,
    ) -> SecretReference:
        """Declare a secret and return a reference to it.

        Args:
            resource_id: Logical id of the secret.
            secret_name: Physical secret name.
            initial_value: Optional initial value.
            key: Optional JSON key the returned reference points at.

        Returns:
            SecretReference to the new secret.

        Raises:
            ValidationError: If the id is already used in this vault.
        """
        if str(resource_id) in self._secrets:
            raise ValidationError(
                f"Secret {resource_id} already exists in vault",
                resource_id=str(resource_id),
            )
        secret = VaultSecret(
            resource_id=resource_id,
            secret_name=secret_name,
            arn=self.environment.arn("secretsmanager", f"secret:{secret_name}"),
            initial_value=initial_value,
        )
        self._secrets[str(resource_id)] = secret
        self._grants[str(resource_id)] = set()
        logger.info("Declared secret %s", resource_id)
        return SecretReference(
            secret_id=resource_id,
            secret_name=secret.secret_name,
            arn=secret.arn,
            key=key,
        )

    def grant_read(self, principal_id: ResourceId, secret: SecretReference) -> None:
        """Grant a principal read access to a secret.

        Raises:
            ReferentialIntegrityError: If the secret is not in this vault.
        """
        self._require(secret, str(principal_id))
        self._grants[str(secret.secret_id)].add(str(principal_id))
        logger.debug("Granted %s read on %s", principal_id, secret.secret_id)

    def can_read(self, principal_id: ResourceId, secret: SecretReference) -> bool:
        """Check if a principal was granted read access to a secret."""
        return str(principal_id) in self._grants.get(str(secret.secret_id), set())

    def contains(self, secret: SecretReference) -> bool:
        """Check if the reference points at a secret in this vault."""
        stored = self._secrets.get(str(secret.secret_id))
        return stored is not None and stored.arn == secret.arn

    def readers(self, secret_id: ResourceId) -> List[str]:
        """Return the sorted principal ids allowed to read a secret."""
        return sorted(self._grants.get(str(secret_id), set()))

    def secrets(self) -> List[VaultSecret]:
        """Return all declared secrets in declaration order."""
        return list(self._secrets.values())

    def _require(self, secret: SecretReference, holder: str) -> None:
        if not self.contains(secret):
            raise ReferentialIntegrityError(holder, str(secret.secret_id))
