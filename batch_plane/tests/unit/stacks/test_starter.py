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

"""Unit tests for the reference stack and its command-line entry point."""

import logging
import re

import pytest
from click.testing import CliRunner

from batch_plane.core.compute.overrides import apply_transforms
from batch_plane.stacks.starter import STACK_NAME, build_starter_stack, main, submit

ENV_VARS = (
    "BATCH_PLANE_ACCOUNT",
    "BATCH_PLANE_REGION",
    "BATCH_PLANE_PROVISIONER_URL",
    "BATCH_PLANE_PROVISIONER_TIMEOUT",
    "BATCH_PLANE_OUTPUT_DIR",
    "BATCH_PLANE_LOG_LEVEL",
)


@pytest.fixture
def rendered(environment):
    """Starter stack rendered with its overrides applied."""
    graph = build_starter_stack(environment)
    return apply_transforms(graph.render(environment), graph.post_render_transforms())


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Isolate BATCH_PLANE_* variables and root logging handlers."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("BATCH_PLANE_OUTPUT_DIR", str(tmp_path))
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield tmp_path
    root.handlers[:] = handlers
    root.setLevel(level)


class TestBuildStarterStack:
    """Tests for the reference stack declaration."""

    def test_job_definition(self, rendered):
        """The job definition runs the parameterized command."""
        job = rendered.get("JobDefinition").properties
        container = job["ContainerProperties"]

        assert job["JobDefinitionName"] == "MyTask"
        assert job["Parameters"] == {"MyParam": ""}
        assert job["Timeout"] == {"AttemptDurationSeconds": 600}
        assert container["Command"] == ["Ref::MyParam"]
        assert container["Vcpus"] == 1
        assert container["Memory"] == 512
        assert container["ReadonlyRootFilesystem"] is True
        assert container["Image"].endswith("/robofarm/aws-batch-starter:latest")

    def test_secret_injection(self, rendered):
        """The execution role and secret are injected after rendering."""
        container = rendered.get("JobDefinition").properties["ContainerProperties"]

        assert container["ExecutionRoleArn"] == (
            "arn:aws:iam::884515231596:role/MyTaskExecutionRole"
        )
        assert [entry["Name"] for entry in container["Secrets"]] == ["MySecret"]
        assert "JobExecutionRole" in rendered.get("JobDefinition").depends_on

    def test_tiers_and_queue(self, rendered):
        """Spot tiers are ordered high capacity first."""
        high = rendered.get("ComputeEnvironmentHigh").properties["ComputeResources"]
        default = rendered.get("ComputeEnvironmentDefault").properties["ComputeResources"]
        order = rendered.get("JobQueue").properties["ComputeEnvironmentOrder"]

        assert (high["Type"], high["MaxvCpus"], high["BidPercentage"]) == ("SPOT", 8, 75)
        assert (default["MaxvCpus"], default["BidPercentage"]) == (1, 100)
        assert high["LaunchTemplate"] == {"LaunchTemplateName": "increase-volume-size"}
        assert [entry["ComputeEnvironment"] for entry in order] == [
            {"Ref": "ComputeEnvironmentHigh"},
            {"Ref": "ComputeEnvironmentDefault"},
        ]

    def test_targets_other_environments(self, other_environment):
        """The same declaration renders for any explicit environment."""
        rendered = build_starter_stack(other_environment).render(other_environment)
        assert rendered.environment == other_environment


class TestMain:
    """Tests for the batch-plane-synth command."""

    def test_synthesizes_template(self, cli_env):
        """Without a provisioner URL the template is written to disk."""
        result = CliRunner().invoke(main, [])

        assert result.exit_code == 0, result.output
        assert (cli_env / f"{STACK_NAME}.template.yaml").exists()
        assert "884515231596/eu-central-1" in result.output

    def test_custom_stack_name(self, cli_env, monkeypatch):
        """The stack name and environment can be overridden."""
        monkeypatch.setenv("BATCH_PLANE_ACCOUNT", "111122223333")
        monkeypatch.setenv("BATCH_PLANE_REGION", "us-east-1")

        result = CliRunner().invoke(main, ["--stack-name", "Nightly"])

        assert result.exit_code == 0, result.output
        assert (cli_env / "Nightly.template.yaml").exists()
        assert "111122223333/us-east-1" in result.output

    def test_incomplete_environment(self, cli_env, monkeypatch):
        """An account without a region is rejected."""
        monkeypatch.setenv("BATCH_PLANE_ACCOUNT", "111122223333")

        result = CliRunner().invoke(main, [])

        assert result.exit_code == 1
        assert not (cli_env / f"{STACK_NAME}.template.yaml").exists()

    def test_missing_declarations(self, cli_env):
        """A missing declaration file exits with an error."""
        result = CliRunner().invoke(main, ["--declarations", str(cli_env / "absent.yaml")])

        assert result.exit_code == 1

    def test_malformed_declarations(self, cli_env):
        """Structural declaration errors are reported, not raised."""
        path = cli_env / "stack.yaml"
        path.write_text(
            "launch_templates:\n"
            "  - id: LaunchTemplate\n"
            "    name: increase-volume-size\n"
            "    block_devices: [{device_name: /dev/xvda, size: 100}]\n"
        )

        result = CliRunner().invoke(main, ["--declarations", str(path)])

        assert result.exit_code == 1
        assert not isinstance(result.exception, TypeError)
        assert "unknown block device keys" in result.output


class TestSubmit:
    """Tests for the batch-plane-submit command."""

    def test_places_in_preferred_tier(self, cli_env):
        """An idle queue places the job in its first tier."""
        result = CliRunner().invoke(
            submit, ["JobDefinition", "JobQueue", "--param", "MyParam=hello"]
        )

        assert result.exit_code == 0, result.output
        assert "MyTask:1 placed on MyQueue in ComputeEnvironmentHigh" in result.output
        assert "command: hello" in result.output

    def test_overflows_by_usage(self, cli_env):
        """Reported usage pushes the job to the next tier, then into the queue."""
        runner = CliRunner()

        overflow = runner.invoke(
            submit, ["JobDefinition", "JobQueue", "--used", "ComputeEnvironmentHigh=8"]
        )
        queued = runner.invoke(submit, [
            "JobDefinition", "JobQueue",
            "--used", "ComputeEnvironmentHigh=8",
            "--used", "ComputeEnvironmentDefault=1",
        ])

        assert overflow.exit_code == 0, overflow.output
        assert "in ComputeEnvironmentDefault" in overflow.output
        assert queued.exit_code == 0, queued.output
        assert "queued on MyQueue until capacity frees up" in queued.output

    def test_issues_time_ordered_ids(self, cli_env):
        """Each submission gets a fresh UUID v7 id."""
        runner = CliRunner()
        outputs = [runner.invoke(submit, ["JobDefinition", "JobQueue"]).output for _ in range(2)]
        ids = [re.search(r"✓ ([0-9a-f-]{36}):", output).group(1) for output in outputs]

        assert ids[0] != ids[1]
        assert all(i[14] == "7" for i in ids)

    def test_unknown_parameter(self, cli_env):
        """Undeclared parameters are rejected."""
        result = CliRunner().invoke(
            submit, ["JobDefinition", "JobQueue", "--param", "Other=x"]
        )

        assert result.exit_code == 1
        assert "Other" in result.output

    def test_unknown_queue(self, cli_env):
        """Submitting to an undeclared queue fails cleanly."""
        result = CliRunner().invoke(submit, ["JobDefinition", "NoSuchQueue"])

        assert result.exit_code == 1
        assert "NoSuchQueue" in result.output

    @pytest.mark.parametrize("option", [
        ["--param", "MyParam"],
        ["--used", "ComputeEnvironmentHigh=lots"],
    ])
    def test_malformed_options(self, cli_env, option):
        """Options that are not NAME=VALUE pairs are usage errors."""
        result = CliRunner().invoke(submit, ["JobDefinition", "JobQueue"] + option)

        assert result.exit_code == 2
