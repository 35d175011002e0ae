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

"""Unit tests for ExecutionIdentity entity."""

import pytest

from batch_plane.core.compute.entities import ExecutionIdentity
from batch_plane.core.compute.exceptions import ReferentialIntegrityError, ValidationError
from batch_plane.core.compute.value_objects import Permission, ResourceId
from batch_plane.tests.mocks.mock_credential_vault import MockCredentialVault


class TestExecutionIdentity:
    """Tests for ExecutionIdentity.create."""

    def test_arn(self, identity):
        """The ARN is the IAM role ARN in the identity's account."""
        assert identity.arn == "arn:aws:iam::884515231596:role/job-role"

    def test_grants_recorded_in_vault(self, identity, vault, secret):
        """Creating the identity grants it read on its secrets."""
        assert vault.can_read(identity.resource_id, secret)
        assert identity.can_read(secret)
        assert identity.can_read(secret.with_key("password"))

    def test_grants_requested_through_port(self, environment):
        """Grants go through the secret store port."""
        store = MockCredentialVault(environment)
        ref = store.create_secret(ResourceId("Token"), "api-token")
        ExecutionIdentity.create(
            resource_id=ResourceId("Role"),
            role_name="role",
            environment=environment,
            permissions=[Permission.READ_SECRETS],
            vault=store,
            secrets=[ref],
        )
        assert store.grants == [("Role", "Token")]

    def test_permissions_coerced(self, environment):
        """Permission names are coerced into Permission."""
        identity = ExecutionIdentity.create(
            ResourceId("Role"), "role", environment, ["emit-logs"]
        )
        assert identity.permissions == frozenset({Permission.EMIT_LOGS})

    def test_unknown_permission(self, environment):
        """Permissions outside the closed set are rejected."""
        with pytest.raises(ValidationError, match="exceed allowed set"):
            ExecutionIdentity.create(ResourceId("Role"), "role", environment, ["admin"])

    def test_secrets_need_read_permission(self, environment, vault, secret):
        """Readable secrets require read-secrets."""
        with pytest.raises(ValidationError, match="without read-secrets"):
            ExecutionIdentity.create(
                ResourceId("Role"),
                "role",
                environment,
                [Permission.EMIT_LOGS],
                vault=vault,
                secrets=[secret],
            )

    def test_repositories_need_pull_permission(self, environment, repository):
        """Pullable repositories require pull-image."""
        with pytest.raises(ValidationError, match="without pull-image"):
            ExecutionIdentity.create(
                ResourceId("Role"),
                "role",
                environment,
                [Permission.EMIT_LOGS],
                repositories=[repository],
            )

    def test_secrets_need_vault(self, environment, secret):
        """Secrets cannot be granted without a vault."""
        with pytest.raises(ValidationError, match="vault is required"):
            ExecutionIdentity.create(
                ResourceId("Role"),
                "role",
                environment,
                [Permission.READ_SECRETS],
                secrets=[secret],
            )

    def test_vault_environment_must_match(self, other_environment, vault, secret):
        """The vault must live in the identity's environment."""
        with pytest.raises(ValidationError, match="does not match"):
            ExecutionIdentity.create(
                ResourceId("Role"),
                "role",
                other_environment,
                [Permission.READ_SECRETS],
                vault=vault,
                secrets=[secret],
            )

    def test_secret_outside_vault(self, environment, vault):
        """Granting a secret the vault does not hold fails."""
        foreign = MockCredentialVault(environment).create_secret(ResourceId("Foreign"), "foreign")
        with pytest.raises(ReferentialIntegrityError):
            ExecutionIdentity.create(
                ResourceId("Role"),
                "role",
                environment,
                [Permission.READ_SECRETS],
                vault=vault,
                secrets=[foreign],
            )

    def test_no_grants_when_a_secret_is_missing(self, environment, vault, secret):
        """A rejected identity leaves no read grants behind."""
        foreign = MockCredentialVault(environment).create_secret(ResourceId("Foreign"), "foreign")
        with pytest.raises(ReferentialIntegrityError, match="Foreign"):
            ExecutionIdentity.create(
                ResourceId("Role"),
                "role",
                environment,
                [Permission.READ_SECRETS],
                vault=vault,
                secrets=[secret, foreign],
            )
        assert vault.readers(secret.secret_id) == []

    def test_invalid_role_name(self, environment):
        """Role names follow the IAM naming rule."""
        with pytest.raises(ValidationError, match="Invalid role name"):
            ExecutionIdentity.create(ResourceId("Role"), "bad role", environment, [])
