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

"""Shared pytest fixtures for Batch Plane tests."""

import sys
from pathlib import Path

import pytest

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from batch_plane.core.compute.entities import CredentialVault  # noqa: E402
from batch_plane.core.compute.value_objects import EnvironmentTarget  # noqa: E402


@pytest.fixture
def environment() -> EnvironmentTarget:
    """Provide the default target environment."""
    return EnvironmentTarget(account="884515231596", region="eu-central-1")


@pytest.fixture
def other_environment() -> EnvironmentTarget:
    """Provide a second, distinct target environment."""
    return EnvironmentTarget(account="111122223333", region="us-east-1")


@pytest.fixture
def vault(environment) -> CredentialVault:  # noqa: W0621
    """Provide an empty credential vault for the default environment."""
    return CredentialVault(environment)
