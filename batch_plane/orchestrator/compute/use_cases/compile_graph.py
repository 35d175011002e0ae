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

"""CompileGraph use case implementation."""

import logging
from typing import List, Tuple

from batch_plane.core.compute.overrides import PostRenderTransform, apply_transforms
from batch_plane.core.compute.ports import Provisioner, ProvisioningResult
from batch_plane.core.compute.rendered import RenderedGraph

from ..commands import CompileGraphCommand
from ..dtos import CompileGraphResponse

logger = logging.getLogger(__name__)


class CompileGraphUseCase:
    """Use case for compiling a declared graph and provisioning it.

    This use case orchestrates compilation with the following guarantees:
    - Validation first: a graph with dangling references never reaches
      the provisioner
    - Overrides last: post-render transforms run after rendering, in a
      deterministic order
    - Explicit environment: the same target is used for validation,
      rendering and provisioning

    Attributes:
        provisioner: Provisioner port.
    """

    def __init__(self, provisioner: Provisioner) -> None:
        """Initialize use case with the provisioner dependency.

        Args:
            provisioner: Provisioner implementation.
        """
        self._provisioner = provisioner

    def execute(self, command: CompileGraphCommand) -> CompileGraphResponse:
        """Execute graph compilation.

        Args:
            command: CompileGraph command with graph and environment.

        Returns:
            CompileGraphResponse DTO with provisioning outcome.

        Raises:
            ValidationError: If declarations are malformed.
            ReferentialIntegrityError: If references dangle or collide.
            UnsupportedOverrideError: If an override rejects a rendered shape.
        """
        rendered, override_count = self._compile(command)
        result = self._provision(command, rendered)
        return CompileGraphResponse.from_result(
            command.stack_name,
            rendered,
            override_count,
            result,
        )

    def compile(self, command: CompileGraphCommand) -> RenderedGraph:
        """Validate, render and override the graph without provisioning it."""
        rendered, _ = self._compile(command)
        return rendered

    def _compile(self, command: CompileGraphCommand) -> Tuple[RenderedGraph, int]:
        rendered = command.graph.render(command.environment)
        transforms: List[PostRenderTransform] = command.graph.post_render_transforms()
        apply_transforms(rendered, transforms)
        logger.info(
            "Compiled %s for %s: %d resources, %d overrides",
            command.stack_name,
            command.environment,
            len(rendered.resources),
            len(transforms),
        )
        return rendered, len(transforms)

    def _provision(
        self,
        command: CompileGraphCommand,
        rendered: RenderedGraph,
    ) -> ProvisioningResult:
        """Hand the rendered graph to the provisioner and log the outcome."""
        result = self._provisioner.provision(
            command.stack_name,
            rendered,
            command.environment,
        )
        if result.succeeded:
            logger.info("Provisioned %s", command.stack_name)
        else:
            for diagnostic in result.diagnostics:
                logger.warning(
                    "Provisioner rejected %s: %s",
                    diagnostic.resource_id or command.stack_name,
                    diagnostic.message,
                )
        return result
