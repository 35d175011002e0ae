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

"""Unit tests for CredentialVault entity."""

import pytest

from batch_plane.core.compute.entities import CredentialVault
from batch_plane.core.compute.exceptions import ReferentialIntegrityError, ValidationError
from batch_plane.core.compute.value_objects import ResourceId


class TestCredentialVault:
    """Tests for CredentialVault."""

    def test_create_secret(self, vault):
        """Declared secrets get an ARN in the vault's environment."""
        ref = vault.create_secret(ResourceId("MySecret"), "MySecret")
        assert ref.arn == "arn:aws:secretsmanager:eu-central-1:884515231596:secret:MySecret"
        assert ref.key is None
        assert vault.contains(ref)
        assert [str(s.resource_id) for s in vault.secrets()] == ["MySecret"]

    def test_create_secret_with_key(self, vault):
        """A key narrows the returned reference."""
        ref = vault.create_secret(ResourceId("Db"), "db-credentials", key="password")
        assert ref.value_from.endswith(":password::")

    def test_duplicate_id(self, vault):
        """Ids are unique within a vault."""
        vault.create_secret(ResourceId("MySecret"), "MySecret")
        with pytest.raises(ValidationError, match="already exists"):
            vault.create_secret(ResourceId("MySecret"), "Other")

    def test_invalid_name(self, vault):
        """Secret names follow the provider naming rule."""
        with pytest.raises(ValidationError, match="Invalid secret name"):
            vault.create_secret(ResourceId("Bad"), "has space")

    def test_grant_read(self, vault):
        """Grants are tracked per secret."""
        ref = vault.create_secret(ResourceId("MySecret"), "MySecret")
        assert not vault.can_read(ResourceId("Role"), ref)
        vault.grant_read(ResourceId("Role"), ref)
        assert vault.can_read(ResourceId("Role"), ref)
        assert vault.readers(ResourceId("MySecret")) == ["Role"]

    def test_grant_unknown_secret(self, vault, other_environment):
        """Grants on secrets from another vault fail."""
        foreign = CredentialVault(other_environment).create_secret(
            ResourceId("MySecret"), "MySecret"
        )
        vault.create_secret(ResourceId("MySecret"), "MySecret")
        with pytest.raises(ReferentialIntegrityError):
            vault.grant_read(ResourceId("Role"), foreign)

    def test_initial_value_hidden_from_repr(self, vault):
        """Initial values never appear in the secret's repr."""
        vault.create_secret(ResourceId("Token"), "token", initial_value="hunter2")
        assert "hunter2" not in repr(vault.secrets()[0])
