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

"""Unit tests for post-render transforms."""

import copy

import pytest

from batch_plane.core.compute.exceptions import (
    ReferentialIntegrityError,
    UnsupportedOverrideError,
)
from batch_plane.core.compute.overrides import SecretInjectionOverride, apply_transforms
from batch_plane.core.compute.rendered import RenderedResource
from batch_plane.core.compute.value_objects import ResourceId


@pytest.fixture
def override(template):
    """Override for the secret-injecting template."""
    return SecretInjectionOverride.for_template(template)


@pytest.fixture
def rendered(graph, environment):
    """Rendered job definition, before overrides."""
    return graph.render(environment).get("JobDefinition")


class TestSecretInjectionOverride:
    """Tests for SecretInjectionOverride."""

    def test_for_template_without_identity(self, template):
        """Templates without an identity need no override."""
        plain = template.revise(
            inject_secrets=False,
            secret_bindings=(),
            execution_identity=None,
        )
        assert SecretInjectionOverride.for_template(plain) is None

    def test_rendered_template_has_no_secrets(self, rendered):
        """The plain rendering carries neither secrets nor a role."""
        container = rendered.properties["ContainerProperties"]
        assert "Secrets" not in container
        assert "ExecutionRoleArn" not in container

    def test_apply(self, override, rendered, identity, secret):
        """The override sets the role and exactly the bound secrets."""
        override.apply(rendered)
        container = rendered.properties["ContainerProperties"]
        assert container["ExecutionRoleArn"] == identity.arn
        assert container["Secrets"] == [
            {"Name": "DB_PASSWORD", "ValueFrom": secret.value_from}
        ]
        assert "JobRole" in rendered.depends_on

    def test_idempotent(self, override, rendered):
        """Applying twice equals applying once."""
        override.apply(rendered)
        once = copy.deepcopy(rendered)
        override.apply(rendered)
        assert rendered == once

    def test_identity_without_bindings(self, template, rendered, identity):
        """Injection with no bindings still sets the role only."""
        override = SecretInjectionOverride.for_template(template.revise(secret_bindings=()))
        override.apply(rendered)
        container = rendered.properties["ContainerProperties"]
        assert container["ExecutionRoleArn"] == identity.arn
        assert "Secrets" not in container

    def test_wrong_type(self, override):
        """Only job definitions are patched."""
        resource = RenderedResource("JobDefinition", "AWS::ECR::Repository", {})
        with pytest.raises(UnsupportedOverrideError, match="Type"):
            override.apply(resource)

    def test_missing_container_properties(self, override, rendered):
        """A job definition without container properties is rejected."""
        del rendered.properties["ContainerProperties"]
        with pytest.raises(UnsupportedOverrideError) as exc_info:
            override.apply(rendered)
        assert exc_info.value.path == "Properties.ContainerProperties"

    def test_unexpected_secret_entry(self, override, rendered):
        """Secret entries of an unknown shape are rejected."""
        rendered.properties["ContainerProperties"]["Secrets"] = [{"Name": "X"}]
        with pytest.raises(UnsupportedOverrideError, match="unexpected entry"):
            override.apply(rendered)

    def test_conflicting_secret(self, override, rendered):
        """A variable already bound elsewhere is not overwritten."""
        rendered.properties["ContainerProperties"]["Secrets"] = [
            {"Name": "DB_PASSWORD", "ValueFrom": "arn:other"}
        ]
        with pytest.raises(UnsupportedOverrideError, match="different secret"):
            override.apply(rendered)

    def test_conflicting_role(self, override, rendered):
        """An existing different role is not overwritten."""
        rendered.properties["ContainerProperties"]["ExecutionRoleArn"] = "arn:other"
        with pytest.raises(UnsupportedOverrideError, match="already set"):
            override.apply(rendered)

    def test_wrong_target(self, override, rendered):
        """The override refuses resources other than its target."""
        rendered.logical_id = "Other"
        with pytest.raises(UnsupportedOverrideError, match="LogicalId"):
            override.apply(rendered)


class TestApplyTransforms:
    """Tests for apply_transforms."""

    def test_missing_target(self, graph, environment, identity):
        """Transforms for absent resources fail."""
        rendered = graph.render(environment)
        orphan = SecretInjectionOverride(ResourceId("Missing"), (), identity)
        with pytest.raises(ReferentialIntegrityError):
            apply_transforms(rendered, [orphan])

    def test_applies_all(self, graph, environment, identity):
        """Every transform is applied to its target."""
        rendered = apply_transforms(graph.render(environment), graph.post_render_transforms())
        container = rendered.get("JobDefinition").properties["ContainerProperties"]
        assert container["ExecutionRoleArn"] == identity.arn
