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

"""Domain exceptions for the compute control plane.

Every error here is raised synchronously while declarations are built,
validated or rendered, before anything is handed to a provisioner.
"""

from typing import Optional


class BatchPlaneDomainError(Exception):
    """Base exception for all compute domain errors."""

    def __init__(self, message: str, resource_id: Optional[str] = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error description.
            resource_id: Optional logical id of the offending resource.
        """
        super().__init__(message)
        self.message = message
        self.resource_id = resource_id


class ValidationError(BatchPlaneDomainError, ValueError):
    """Malformed or out-of-range construction input."""


class UnsupportedOverrideError(BatchPlaneDomainError):
    """A post-render override met a rendered shape it does not recognize."""

    def __init__(
        self,
        resource_id: str,
        path: str,
        reason: str,
    ) -> None:
        """Initialize unsupported override error.

        Args:
            resource_id: Logical id of the rendered resource.
            path: Dotted path inside the rendered properties.
            reason: What was expected at that path.
        """
        super().__init__(
            f"Cannot apply override to {resource_id} at {path}: {reason}",
            resource_id=resource_id,
        )
        self.path = path
        self.reason = reason


class UnsatisfiableReservationError(BatchPlaneDomainError):
    """No tier in a queue can ever satisfy a job's resource reservation."""

    def __init__(
        self,
        queue_id: str,
        vcpus: int,
        memory_mib: int,
    ) -> None:
        """Initialize unsatisfiable reservation error.

        Args:
            queue_id: Logical id of the dispatch queue.
            vcpus: Requested vCPUs.
            memory_mib: Requested memory in MiB.
        """
        super().__init__(
            f"No tier in queue {queue_id} can ever satisfy "
            f"{vcpus} vCPU / {memory_mib} MiB",
            resource_id=queue_id,
        )
        self.queue_id = queue_id
        self.vcpus = vcpus
        self.memory_mib = memory_mib


class ReferentialIntegrityError(BatchPlaneDomainError):
    """A graph references a resource that does not exist or does not match."""

    def __init__(
        self,
        resource_id: str,
        reference: str,
        reason: Optional[str] = None,
    ) -> None:
        """Initialize referential integrity error.

        Args:
            resource_id: Logical id of the resource holding the reference.
            reference: The dangling or mismatched reference.
            reason: Optional explanation; defaults to "does not exist".
        """
        detail = reason or "does not exist"
        super().__init__(
            f"{resource_id} references {reference}, which {detail}",
            resource_id=resource_id,
        )
        self.reference = reference


class DuplicateResourceError(ReferentialIntegrityError):
    """Two resources share a logical id or a reserved physical name."""

    def __init__(self, resource_id: str, name: str) -> None:
        super().__init__(
            resource_id,
            name,
            reason="is already declared in this graph",
        )
        self.name = name
