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

"""Job template entity."""

import dataclasses
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..exceptions import ValidationError
from ..value_objects import ResourceId, ResourceReservation, SecretBinding
from .execution_identity import ExecutionIdentity
from .image_source import ImageSource

PARAMETER_PREFIX = "Ref::"


def parameter_name(argument: str) -> Optional[str]:
    """Return the parameter a command argument refers to, if any."""
    if argument.startswith(PARAMETER_PREFIX):
        return argument[len(PARAMETER_PREFIX):]
    return None


@dataclass(frozen=True)
class JobTemplate:
    """Immutable description of how to run one unit of work.

    A template never changes once built; ``revise`` produces the next
    revision. Secrets and the execution identity are not rendered by the
    template itself, they are added by a post-render override.

    Attributes:
        resource_id: Logical id of the template.
        name: Physical template name, unique within a deployment.
        image: Image to execute.
        reservation: vCPU and memory reserved per job instance.
        command: Command arguments; ``Ref::<name>`` arguments are parameters.
        parameters: Parameter defaults, read-only.
        timeout_seconds: Attempt duration after which the job is failed.
        read_only_root_filesystem: Mount the container root read-only.
        inject_secrets: Inject ``secret_bindings`` into the environment.
        secret_bindings: Environment variables populated from secrets.
        execution_identity: Role used to pull the image, read secrets and log.
        revision: Template revision, starting at 1.
    """

    resource_id: ResourceId
    name: str
    image: ImageSource
    reservation: ResourceReservation
    command: Tuple[str, ...]
    timeout_seconds: int
    read_only_root_filesystem: bool
    inject_secrets: bool
    parameters: Mapping[str, str] = field(default_factory=dict)
    secret_bindings: Tuple[SecretBinding, ...] = ()
    execution_identity: Optional[ExecutionIdentity] = None
    revision: int = 1

    NAME_PATTERN: ClassVar[str] = r'^[A-Za-z0-9][A-Za-z0-9_-]{0,127}$'

    def __post_init__(self) -> None:
        """Freeze collections and validate the template."""
        object.__setattr__(self, "command", tuple(self.command))
        object.__setattr__(self, "secret_bindings", tuple(self.secret_bindings))
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        self._validate()

    def _validate(self) -> None:
        rid = str(self.resource_id)
        if not re.match(self.NAME_PATTERN, self.name or ""):
            raise ValidationError(f"Invalid job template name: {self.name!r}", resource_id=rid)
        if not self.command:
            raise ValidationError("Command cannot be empty", resource_id=rid)
        for argument in self.command:
            if not isinstance(argument, str):
                raise ValidationError(
                    f"Command arguments must be strings, got {argument!r}",
                    resource_id=rid,
                )
        missing = sorted(set(self.referenced_parameters()) - set(self.parameters))
        if missing:
            raise ValidationError(
                f"Command references undeclared parameters: {missing}",
                resource_id=rid,
            )
        if (
            isinstance(self.timeout_seconds, bool)
            or not isinstance(self.timeout_seconds, int)
            or self.timeout_seconds <= 0
        ):
            raise ValidationError(
                f"Timeout must be a positive number of seconds, got {self.timeout_seconds!r}",
                resource_id=rid,
            )
        if self.revision < 1:
            raise ValidationError(f"Revision must be at least 1, got {self.revision}", resource_id=rid)
        self._validate_secrets(rid)

    def _validate_secrets(self, rid: str) -> None:
        env_vars = [b.env_var for b in self.secret_bindings]
        duplicates = sorted({v for v in env_vars if env_vars.count(v) > 1})
        if duplicates:
            raise ValidationError(
                f"Secret bindings repeat environment variables: {duplicates}",
                resource_id=rid,
            )
        if self.secret_bindings and not self.inject_secrets:
            raise ValidationError(
                "Secret bindings are declared but secret injection is disabled",
                resource_id=rid,
            )
        if self.inject_secrets and self.execution_identity is None:
            raise ValidationError(
                "Secret injection needs an execution identity",
                resource_id=rid,
            )

    @classmethod
    def create(
        cls,
        resource_id: ResourceId,
        name: str,
        image: ImageSource,
        vcpus: int,
        memory_mib: int,
        command: Sequence[str],
        timeout_seconds: int,
        *,
        read_only_root_filesystem: bool,
        inject_secrets: bool,
        parameters: Optional[Mapping[str, str]] = None,
        secret_bindings: Iterable[SecretBinding] = (),
        execution_identity: Optional[ExecutionIdentity] = None,
    ) -> "JobTemplate":
        """Build a job template.

        ``read_only_root_filesystem`` and ``inject_secrets`` have no defaults
        and must be chosen by the caller.

        Raises:
            ValidationError: If any input is malformed or inconsistent.
        """
        return cls(
            resource_id=resource_id,
            name=name,
            image=image,
            reservation=ResourceReservation(vcpus, memory_mib),
            command=tuple(command),
            timeout_seconds=timeout_seconds,
            read_only_root_filesystem=read_only_root_filesystem,
            inject_secrets=inject_secrets,
            parameters=dict(parameters or {}),
            secret_bindings=tuple(secret_bindings),
            execution_identity=execution_identity,
        )

    def revise(self, **changes) -> "JobTemplate":
        """Return the next revision of this template with changes applied."""
        if "resource_id" in changes or "name" in changes:
            raise ValidationError(
                "A revision keeps the template's id and name",
                resource_id=str(self.resource_id),
            )
        changes["revision"] = self.revision + 1
        return dataclasses.replace(self, **changes)

    def referenced_parameters(self) -> List[str]:
        """Return parameter names referenced by the command, in order."""
        names = []
        for argument in self.command:
            name = parameter_name(argument)
            if name is not None and name not in names:
                names.append(name)
        return names

    @property
    def physical_name(self) -> str:
        return self.name

    def __hash__(self) -> int:
        return hash((self.resource_id, self.revision))
