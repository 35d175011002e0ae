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

"""Provisioner that writes synthesized templates to disk."""

import logging
from pathlib import Path
from typing import Union

import yaml

from batch_plane.core.compute.ports import ProvisioningResult
from batch_plane.core.compute.rendered import RenderedGraph
from batch_plane.core.compute.value_objects import EnvironmentTarget

from .exceptions import ProvisionerError

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".template.yaml"


class FileSystemProvisioner:
    """Writes ``<stack>.template.yaml`` into an output directory."""

    def __init__(self, output_dir: Union[str, Path]) -> None:
        self.output_dir = Path(output_dir)

    def provision(
        self,
        stack_name: str,
        graph: RenderedGraph,
        environment: EnvironmentTarget,
    ) -> ProvisioningResult:
        """Write the template and report its path as the result location.

        Raises:
            ProvisionerError: If the template cannot be written.
        """
        path = self.output_dir / f"{stack_name}{TEMPLATE_SUFFIX}"
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as handle:
                yaml.safe_dump(graph.to_template(), handle, sort_keys=True)
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)
            raise ProvisionerError(f"Failed to write {path}: {exc}") from exc
        logger.info("Synthesized %s for %s to %s", stack_name, environment, path)
        return ProvisioningResult(succeeded=True, location=str(path))
