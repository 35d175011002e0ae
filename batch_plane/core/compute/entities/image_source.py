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

"""Image registry and image source entities."""

import re
from dataclasses import dataclass
from typing import ClassVar, Optional

from ..exceptions import ValidationError
from ..value_objects import EnvironmentTarget, ImageReference, ResourceId


@dataclass(frozen=True)
class ImageRepository:
    """Container image repository declared alongside the jobs.

    Attributes:
        resource_id: Logical id of the repository.
        repository_name: Physical repository name.
        max_image_count: Lifecycle rule; older images beyond this are expired.
    """

    resource_id: ResourceId
    repository_name: str
    max_image_count: int = 5

    NAME_PATTERN: ClassVar[str] = r'^[a-z0-9]+([._-][a-z0-9]+)*(/[a-z0-9]+([._-][a-z0-9]+)*)*$'
    MAX_NAME_LENGTH: ClassVar[int] = 256

    def __post_init__(self) -> None:
        if len(self.repository_name) > self.MAX_NAME_LENGTH or not re.match(
            self.NAME_PATTERN, self.repository_name
        ):
            raise ValidationError(
                f"Invalid repository name: {self.repository_name!r}",
                resource_id=str(self.resource_id),
            )
        if self.max_image_count < 1:
            raise ValidationError(
                f"max_image_count must be at least 1, got {self.max_image_count}",
                resource_id=str(self.resource_id),
            )

    @property
    def physical_name(self) -> str:
        return self.repository_name

    def arn(self, environment: EnvironmentTarget) -> str:
        return environment.arn("ecr", f"repository/{self.repository_name}")

    def uri(self, environment: EnvironmentTarget) -> str:
        """Registry URI of the repository in the given environment."""
        return (
            f"{environment.account}.dkr.ecr.{environment.region}.amazonaws.com/"
            f"{self.repository_name}"
        )

    def image(self, tag: str = "latest") -> "ImageSource":
        """Reference a tagged image in this repository."""
        return ImageSource(
            reference=ImageReference(self.repository_name, tag=tag),
            repository_id=self.resource_id,
        )

    def image_by_digest(self, digest: str) -> "ImageSource":
        """Reference an image in this repository by content digest."""
        return ImageSource(
            reference=ImageReference(self.repository_name, digest=digest),
            repository_id=self.resource_id,
        )


@dataclass(frozen=True)
class ImageSource:
    """Versioned container image a job template executes.

    When ``repository_id`` is set the image lives in a repository declared
    in the same graph and its URI is resolved against the target environment.
    """

    reference: ImageReference
    repository_id: Optional[ResourceId] = None

    @classmethod
    def external(cls, reference: str) -> "ImageSource":
        """Reference an image hosted outside the graph."""
        return cls(reference=ImageReference.parse(reference))

    def uri(self, environment: EnvironmentTarget) -> str:
        """Full image URI in the given environment."""
        if self.repository_id is None:
            return str(self.reference)
        host = f"{environment.account}.dkr.ecr.{environment.region}.amazonaws.com"
        return f"{host}/{self.reference}"
