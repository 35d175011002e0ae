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

"""Value objects for the compute domain.

All value objects are immutable and defined by their values, not identity.
"""

import ipaddress
import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union

from .exceptions import ValidationError


@dataclass(frozen=True)
class ResourceId:
    """Caller-assigned stable logical identifier of a declared resource.

    Attributes:
        value: Identifier string.

    Raises:
        ValidationError: If value does not match the identifier pattern.
    """

    value: str

    PATTERN: ClassVar[str] = r'^[A-Za-z][A-Za-z0-9-]{0,127}$'

    def __post_init__(self) -> None:
        """Validate identifier format."""
        if not isinstance(self.value, str) or not re.match(self.PATTERN, self.value):
            raise ValidationError(
                f"Invalid resource id: {self.value!r}. "
                f"Must start with a letter and contain only letters, digits "
                f"and hyphens (max 128 characters)"
            )

    def __str__(self) -> str:
        """Return string representation."""
        return self.value


@dataclass(frozen=True)
class SubmissionId:
    """UUID v7 identifier for a job submission.

    Attributes:
        value: String representation of UUID v7.

    Raises:
        ValidationError: If value does not match UUID v7 pattern.
    """

    value: str

    UUID_V7_PATTERN: ClassVar[str] = (
        r'^[0-9a-f]{8}-[0-9a-f]{4}-7[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$'
    )

    def __post_init__(self) -> None:
        """Validate UUID v7 format."""
        if not re.match(self.UUID_V7_PATTERN, self.value.lower()):
            raise ValidationError(f"Invalid UUID v7 format: {self.value}")

    def __str__(self) -> str:
        """Return string representation."""
        return self.value


@dataclass(frozen=True)
class EnvironmentTarget:
    """Account and region a graph is compiled for.

    Attributes:
        account: 12-digit account number.
        region: Region name, e.g. ``eu-central-1``.
        partition: ARN partition.

    Raises:
        ValidationError: If account or region is malformed.
    """

    account: str
    region: str
    partition: str = "aws"

    ACCOUNT_PATTERN: ClassVar[str] = r'^[0-9]{12}$'
    REGION_PATTERN: ClassVar[str] = r'^[a-z]{2}(-[a-z]+)+-[0-9]$'

    def __post_init__(self) -> None:
        """Validate account and region format."""
        if not re.match(self.ACCOUNT_PATTERN, self.account or ""):
            raise ValidationError(
                f"Invalid account: {self.account!r}. Expected 12 digits"
            )
        if not re.match(self.REGION_PATTERN, self.region or ""):
            raise ValidationError(f"Invalid region: {self.region!r}")

    def arn(self, service: str, resource: str) -> str:
        """Build a regional ARN for a resource in this environment."""
        return (
            f"arn:{self.partition}:{service}:{self.region}:"
            f"{self.account}:{resource}"
        )

    def iam_arn(self, resource: str) -> str:
        """Build a global IAM ARN for a resource in this environment."""
        return f"arn:{self.partition}:iam::{self.account}:{resource}"

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.account}/{self.region}"


@dataclass(frozen=True)
class ImageReference:
    """Immutable container image reference.

    Exactly one of ``tag`` or ``digest`` must be given.

    Attributes:
        repository: Registry repository (with or without registry host).
        tag: Image tag.
        digest: Content digest in ``sha256:<hex>`` form.

    Raises:
        ValidationError: If the reference is malformed.
    """

    repository: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    REPOSITORY_PATTERN: ClassVar[str] = (
        r'^[a-z0-9]+([._/-][a-z0-9]+)*(:[0-9]+)?(/[a-z0-9]+([._/-][a-z0-9]+)*)*$'
    )
    TAG_PATTERN: ClassVar[str] = r'^[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}$'
    DIGEST_PATTERN: ClassVar[str] = r'^sha256:[0-9a-f]{64}$'

    def __post_init__(self) -> None:
        """Validate repository, tag and digest."""
        if not self.repository or not re.match(self.REPOSITORY_PATTERN, self.repository):
            raise ValidationError(f"Invalid image repository: {self.repository!r}")
        if (self.tag is None) == (self.digest is None):
            raise ValidationError(
                f"Image {self.repository} needs exactly one of tag or digest"
            )
        if self.tag is not None and not re.match(self.TAG_PATTERN, self.tag):
            raise ValidationError(f"Invalid image tag: {self.tag!r}")
        if self.digest is not None and not re.match(self.DIGEST_PATTERN, self.digest):
            raise ValidationError(f"Invalid image digest: {self.digest!r}")

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """Parse ``repo:tag`` or ``repo@sha256:...`` into a reference."""
        if "@" in reference:
            repository, digest = reference.split("@", 1)
            return cls(repository=repository, digest=digest)
        head, sep, tail = reference.rpartition(":")
        if not sep or "/" in tail:
            raise ValidationError(
                f"Image reference {reference!r} has no tag or digest"
            )
        return cls(repository=head, tag=tail)

    def __str__(self) -> str:
        """Return string representation."""
        if self.digest is not None:
            return f"{self.repository}@{self.digest}"
        return f"{self.repository}:{self.tag}"


@dataclass(frozen=True)
class ResourceReservation:
    """vCPU and memory a single job instance reserves.

    Raises:
        ValidationError: If either value is not a positive integer.
    """

    vcpus: int
    memory_mib: int

    def __post_init__(self) -> None:
        for label, value in (("vCPU", self.vcpus), ("memory", self.memory_mib)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValidationError(
                    f"{label} reservation must be a positive integer, got {value!r}"
                )


class PriceStrategy(str, Enum):
    """How capacity in a tier is bought."""

    SPOT = "SPOT"
    ON_DEMAND = "EC2"


class Permission(str, Enum):
    """Closed set of permissions an execution identity may hold."""

    EMIT_LOGS = "emit-logs"
    PULL_IMAGE = "pull-image"
    READ_SECRETS = "read-secrets"


class NetworkProtocol(str, Enum):
    """Protocols an inbound rule may allow."""

    TCP = "tcp"
    UDP = "udp"
    ICMP = "icmp"
    ALL = "-1"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None

    def takes_ports(self) -> bool:
        """Check whether rules for this protocol carry a port range."""
        return self in {NetworkProtocol.TCP, NetworkProtocol.UDP}


class PlacementState(str, Enum):
    """Outcome of routing a job instance through a dispatch queue."""

    PLACED = "PLACED"
    QUEUED = "QUEUED"


@dataclass(frozen=True)
class PortRange:
    """Inclusive port range.

    Raises:
        ValidationError: If ports are out of range or reversed.
    """

    from_port: int
    to_port: int

    MIN_PORT: ClassVar[int] = 0
    MAX_PORT: ClassVar[int] = 65535

    def __post_init__(self) -> None:
        for port in (self.from_port, self.to_port):
            if isinstance(port, bool) or not isinstance(port, int):
                raise ValidationError(f"Port must be an integer, got {port!r}")
            if port < self.MIN_PORT or port > self.MAX_PORT:
                raise ValidationError(
                    f"Port must be between {self.MIN_PORT} and {self.MAX_PORT}, "
                    f"got {port}"
                )
        if self.from_port > self.to_port:
            raise ValidationError(
                f"Port range start {self.from_port} exceeds end {self.to_port}"
            )

    @classmethod
    def single(cls, port: int) -> "PortRange":
        """Build a range covering exactly one port."""
        return cls(port, port)

    def contains(self, port: int) -> bool:
        """Check if a port falls inside the range."""
        return self.from_port <= port <= self.to_port

    def __str__(self) -> str:
        if self.from_port == self.to_port:
            return str(self.from_port)
        return f"{self.from_port}-{self.to_port}"


@dataclass(frozen=True)
class AddressBlock:
    """IPv4 address block of a network perimeter.

    Raises:
        ValidationError: If the CIDR is malformed, has host bits set, or
            its prefix is outside /16 to /28.
    """

    cidr: str

    MIN_PREFIX: ClassVar[int] = 16
    MAX_PREFIX: ClassVar[int] = 28

    def __post_init__(self) -> None:
        """Validate CIDR notation and prefix length."""
        try:
            network = ipaddress.IPv4Network(self.cidr, strict=True)
        except (ipaddress.AddressValueError, ipaddress.NetmaskValueError, ValueError) as exc:
            raise ValidationError(f"Invalid address block {self.cidr!r}: {exc}") from exc
        if not self.MIN_PREFIX <= network.prefixlen <= self.MAX_PREFIX:
            raise ValidationError(
                f"Address block prefix must be between /{self.MIN_PREFIX} "
                f"and /{self.MAX_PREFIX}, got /{network.prefixlen}"
            )

    @property
    def network(self) -> ipaddress.IPv4Network:
        return ipaddress.IPv4Network(self.cidr)

    def __str__(self) -> str:
        return self.cidr


ANY_IPV4 = "0.0.0.0/0"


def parse_address(address: str) -> Union[ipaddress.IPv4Address, ipaddress.IPv6Address]:
    """Parse an IP address.

    Raises:
        ValidationError: If the address is malformed.
    """
    try:
        return ipaddress.ip_address(address)
    except ValueError as exc:
        raise ValidationError(f"Invalid address {address!r}: {exc}") from exc


@dataclass(frozen=True)
class InboundRule:
    """One entry of a perimeter's inbound allow-list.

    Attributes:
        source_cidr: Source network in CIDR notation (IPv4 or IPv6).
        protocol: Allowed protocol.
        ports: Port range; required for tcp/udp, absent otherwise.
        description: Free-form rule description.

    Raises:
        ValidationError: If the source, protocol or ports are malformed.
    """

    source_cidr: str
    protocol: NetworkProtocol
    ports: Optional[PortRange] = None
    description: str = ""

    def __post_init__(self) -> None:
        try:
            ipaddress.ip_network(self.source_cidr, strict=True)
        except ValueError as exc:
            raise ValidationError(
                f"Invalid inbound source {self.source_cidr!r}: {exc}"
            ) from exc
        try:
            protocol = NetworkProtocol(self.protocol)
        except ValueError as exc:
            raise ValidationError(
                f"Unknown protocol: {self.protocol!r}. "
                f"Must be one of: {sorted(p.name.lower() for p in NetworkProtocol)}"
            ) from exc
        object.__setattr__(self, "protocol", protocol)
        if protocol.takes_ports() and self.ports is None:
            raise ValidationError(f"{protocol.value} rule needs a port or port range")
        if not protocol.takes_ports() and self.ports is not None:
            raise ValidationError(f"{protocol.value} rule cannot carry ports")

    @classmethod
    def tcp(
        cls,
        port: int,
        source_cidr: str = ANY_IPV4,
        description: str = "",
    ) -> "InboundRule":
        """Allow one TCP port from a source network."""
        return cls(source_cidr, NetworkProtocol.TCP, PortRange.single(port), description)

    def matches(self, address: str, protocol: NetworkProtocol, port: Optional[int]) -> bool:
        """Check if traffic from address on protocol/port is allowed by this rule."""
        ip = parse_address(address)
        if ip not in ipaddress.ip_network(self.source_cidr):
            return False
        if self.protocol is NetworkProtocol.ALL:
            return True
        if self.protocol is not NetworkProtocol(protocol):
            return False
        if self.ports is None:
            return True
        return port is not None and self.ports.contains(port)


@dataclass(frozen=True)
class SecretReference:
    """Reference to a vault secret, optionally narrowed to one JSON key.

    Attributes:
        secret_id: Logical id of the vault secret resource.
        secret_name: Physical secret name.
        arn: ARN-equivalent of the secret.
        key: Optional JSON key inside the secret value.
    """

    secret_id: ResourceId
    secret_name: str
    arn: str
    key: Optional[str] = None

    KEY_PATTERN: ClassVar[str] = r'^[A-Za-z0-9_.+=@/-]{1,256}$'

    def __post_init__(self) -> None:
        if self.key is not None and not re.match(self.KEY_PATTERN, self.key):
            raise ValidationError(f"Invalid secret key: {self.key!r}")

    def with_key(self, key: str) -> "SecretReference":
        """Return a reference to one JSON key of the same secret."""
        return SecretReference(self.secret_id, self.secret_name, self.arn, key)

    @property
    def value_from(self) -> str:
        """Full reference the substrate resolves at container start."""
        if self.key is None:
            return self.arn
        return f"{self.arn}:{self.key}::"


@dataclass(frozen=True)
class SecretBinding:
    """Environment variable populated from a secret at container start.

    Raises:
        ValidationError: If the environment variable name is malformed.
    """

    env_var: str
    secret: SecretReference

    ENV_VAR_PATTERN: ClassVar[str] = r'^[A-Za-z_][A-Za-z0-9_]*$'

    def __post_init__(self) -> None:
        if not re.match(self.ENV_VAR_PATTERN, self.env_var or ""):
            raise ValidationError(f"Invalid environment variable name: {self.env_var!r}")
