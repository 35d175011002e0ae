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

"""YAML stack declarations.

Loads a declaration file such as::

    name: starter
    repositories:
      - id: Repository
        name: robofarm/batch-starter
    perimeters:
      - id: Vpc
        name: batch-vpc
        cidr: 10.0.0.0/16
        inbound:
          - {protocol: tcp, port: 22, source: 0.0.0.0/0}
    tiers:
      - {id: HighCapacity, name: high, price_strategy: SPOT,
         bid_percentage: 75, max_size: 8, perimeter: Vpc}
    queues:
      - id: MyQueue
        name: my-queue
        tiers: [{tier: HighCapacity, priority: 1}]

and builds the declared entities into a ``ResourceGraph``. Domain
validation errors propagate unchanged; structural problems with the file
itself raise ``DeclarationError``.
"""

import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from batch_plane.core.compute.entities import (
    BlockDevice,
    CapacityTier,
    CredentialVault,
    DispatchQueue,
    ExecutionIdentity,
    ImageRepository,
    ImageSource,
    JobTemplate,
    LaunchTemplate,
    NetworkPerimeter,
)
from batch_plane.core.compute.exceptions import ReferentialIntegrityError
from batch_plane.core.compute.graph import ResourceGraph
from batch_plane.core.compute.value_objects import (
    ANY_IPV4,
    EnvironmentTarget,
    InboundRule,
    PortRange,
    PriceStrategy,
    ResourceId,
    SecretBinding,
    SecretReference,
)

from .exceptions import DeclarationError

logger = logging.getLogger(__name__)

SECTIONS = (
    "name",
    "repositories",
    "secrets",
    "identities",
    "launch_templates",
    "perimeters",
    "tiers",
    "templates",
    "queues",
)

BLOCK_DEVICE_KEYS = frozenset(f.name for f in fields(BlockDevice))


def load_declarations(path: Union[str, Path], environment: EnvironmentTarget) -> ResourceGraph:
    """Load a YAML declaration file into a resource graph.

    Args:
        path: Path to the declaration file.
        environment: Target the vault and identities are declared for.

    Returns:
        ResourceGraph holding every declared resource.

    Raises:
        DeclarationError: If the file is missing, not YAML or malformed.
        ValidationError: If a declared value is rejected by the domain.
        ReferentialIntegrityError: If a declaration names an unknown id.
    """
    path = Path(path)
    if not path.exists():
        raise DeclarationError(f"Declaration file not found: {path}", path=str(path))
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise DeclarationError(f"Invalid YAML syntax: {exc}", path=str(path)) from exc
    if not isinstance(raw, dict):
        raise DeclarationError("Declaration file must contain a mapping", path=str(path))
    unknown = sorted(set(raw) - set(SECTIONS))
    if unknown:
        raise DeclarationError(f"Unknown sections: {unknown}", path=str(path))

    graph = _DeclarationBuilder(raw, environment, str(path)).build(raw.get("name") or path.stem)
    logger.info("Loaded %d resources from %s", len(graph.resources()), path)
    return graph


class _DeclarationBuilder:
    """Builds entities section by section, resolving ids as it goes."""

    def __init__(self, raw: Mapping[str, Any], environment: EnvironmentTarget, path: str) -> None:
        self._raw = raw
        self._path = path
        self._vault = CredentialVault(environment)
        self._environment = environment
        self._repositories: Dict[str, ImageRepository] = {}
        self._secrets: Dict[str, SecretReference] = {}
        self._identities: Dict[str, ExecutionIdentity] = {}
        self._tiers: Dict[str, CapacityTier] = {}

    def build(self, name: str) -> ResourceGraph:
        graph = ResourceGraph(name=str(name))
        for entry in self._section("secrets"):
            self._declare_secret(entry)
        graph.add_vault(self._vault)
        for entry in self._section("repositories"):
            repository = ImageRepository(
                resource_id=self._id(entry),
                repository_name=self._require(entry, "name"),
                max_image_count=entry.get("max_image_count", 5),
            )
            self._repositories[str(repository.resource_id)] = graph.add(repository)
        for entry in self._section("identities"):
            identity = self._identity(entry)
            self._identities[str(identity.resource_id)] = graph.add(identity)
        for entry in self._section("launch_templates"):
            graph.add(self._launch_template(entry))
        for entry in self._section("perimeters"):
            graph.add(self._perimeter(entry))
        for entry in self._section("tiers"):
            tier = self._tier(entry)
            self._tiers[str(tier.resource_id)] = graph.add(tier)
        for entry in self._section("templates"):
            graph.add(self._template(entry))
        for entry in self._section("queues"):
            graph.add(self._queue(entry))
        return graph

    def _section(self, key: str) -> List[Mapping[str, Any]]:
        entries = self._raw.get(key) or []
        if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
            raise DeclarationError(f"Section {key!r} must be a list of mappings", path=self._path)
        return entries

    def _require(self, entry: Mapping[str, Any], key: str) -> Any:
        if key not in entry:
            raise DeclarationError(
                f"Declaration {entry.get('id', '?')!r} is missing {key!r}",
                path=self._path,
            )
        return entry[key]

    def _id(self, entry: Mapping[str, Any]) -> ResourceId:
        return ResourceId(str(self._require(entry, "id")))

    def _list(self, entry: Mapping[str, Any], key: str, required: bool = False) -> List[Any]:
        value = self._require(entry, key) if required else entry.get(key) or []
        if not isinstance(value, list):
            raise DeclarationError(
                f"Declaration {entry.get('id', '?')!r}: {key!r} must be a list",
                path=self._path,
            )
        return value

    def _mappings(
        self, entry: Mapping[str, Any], key: str, required: bool = False
    ) -> List[Mapping[str, Any]]:
        values = self._list(entry, key, required)
        if not all(isinstance(value, dict) for value in values):
            raise DeclarationError(
                f"Declaration {entry.get('id', '?')!r}: {key!r} must be a list of mappings",
                path=self._path,
            )
        return values

    def _mapping(self, entry: Mapping[str, Any], key: str) -> Mapping[str, Any]:
        value = entry.get(key) or {}
        if not isinstance(value, dict):
            raise DeclarationError(
                f"Declaration {entry.get('id', '?')!r}: {key!r} must be a mapping",
                path=self._path,
            )
        return value

    def _lookup(self, table: Mapping[str, Any], holder: str, reference: Any) -> Any:
        if isinstance(reference, (dict, list)):
            raise DeclarationError(
                f"Declaration {holder!r} has a malformed reference {reference!r}",
                path=self._path,
            )
        if str(reference) not in table:
            raise ReferentialIntegrityError(holder, str(reference))
        return table[str(reference)]

    def _declare_secret(self, entry: Mapping[str, Any]) -> None:
        reference = self._vault.create_secret(
            self._id(entry),
            self._require(entry, "name"),
            initial_value=entry.get("initial_value"),
            key=entry.get("key"),
        )
        self._secrets[str(reference.secret_id)] = reference

    def _identity(self, entry: Mapping[str, Any]) -> ExecutionIdentity:
        rid = str(self._require(entry, "id"))
        kwargs: Dict[str, Any] = {}
        if "log_group" in entry:
            kwargs["log_group"] = entry["log_group"]
        return ExecutionIdentity.create(
            resource_id=ResourceId(rid),
            role_name=self._require(entry, "role_name"),
            environment=self._environment,
            permissions=self._list(entry, "permissions", required=True),
            vault=self._vault,
            secrets=[self._lookup(self._secrets, rid, s) for s in self._list(entry, "secrets")],
            repositories=[
                self._lookup(self._repositories, rid, r) for r in self._list(entry, "repositories")
            ],
            **kwargs,
        )

    def _launch_template(self, entry: Mapping[str, Any]) -> LaunchTemplate:
        if entry.get("block_devices") is None:
            block_devices: Tuple[BlockDevice, ...] = (BlockDevice(),)
        else:
            block_devices = tuple(
                self._block_device(entry, device)
                for device in self._mappings(entry, "block_devices")
            )
        return LaunchTemplate(
            resource_id=self._id(entry),
            name=self._require(entry, "name"),
            block_devices=block_devices,
        )

    def _block_device(self, entry: Mapping[str, Any], device: Mapping[str, Any]) -> BlockDevice:
        unknown = sorted(set(device) - BLOCK_DEVICE_KEYS)
        if unknown:
            raise DeclarationError(
                f"Launch template {entry.get('id', '?')!r} has unknown block device keys: {unknown}",
                path=self._path,
            )
        return BlockDevice(**device)

    def _perimeter(self, entry: Mapping[str, Any]) -> NetworkPerimeter:
        rules = [self._inbound_rule(rule) for rule in self._mappings(entry, "inbound")]
        return NetworkPerimeter.create(
            resource_id=self._id(entry),
            name=self._require(entry, "name"),
            cidr=self._require(entry, "cidr"),
            allowed_inbound=rules,
            max_availability_zones=entry.get("max_availability_zones", 4),
        )

    @staticmethod
    def _inbound_rule(rule: Mapping[str, Any]) -> InboundRule:
        ports: Optional[PortRange] = None
        if "port" in rule:
            ports = PortRange.single(rule["port"])
        elif "from_port" in rule or "to_port" in rule:
            ports = PortRange(rule.get("from_port"), rule.get("to_port"))
        return InboundRule(
            source_cidr=rule.get("source", ANY_IPV4),
            protocol=rule.get("protocol", "tcp"),
            ports=ports,
            description=rule.get("description", ""),
        )

    def _tier(self, entry: Mapping[str, Any]) -> CapacityTier:
        strategy = str(self._require(entry, "price_strategy"))
        launch_template = entry.get("launch_template")
        return CapacityTier.create(
            resource_id=self._id(entry),
            name=self._require(entry, "name"),
            price_strategy=PriceStrategy.__members__.get(strategy.upper(), strategy),
            max_size=self._require(entry, "max_size"),
            perimeter_id=ResourceId(str(self._require(entry, "perimeter"))),
            instance_types=entry.get("instance_types", ()),
            bid_percentage=entry.get("bid_percentage"),
            launch_template_id=ResourceId(str(launch_template)) if launch_template else None,
            enabled=entry.get("enabled", True),
        )

    def _image(self, holder: str, image: Any) -> ImageSource:
        if isinstance(image, str):
            return ImageSource.external(image)
        if not isinstance(image, dict) or "repository" not in image:
            raise DeclarationError(
                f"Template {holder!r} image must be a reference or a repository mapping",
                path=self._path,
            )
        repository = self._lookup(self._repositories, holder, image["repository"])
        if "digest" in image:
            return repository.image_by_digest(image["digest"])
        return repository.image(image.get("tag", "latest"))

    def _bindings(self, holder: str, secrets: Mapping[str, Any]) -> List[SecretBinding]:
        bindings = []
        for env_var, target in secrets.items():
            if isinstance(target, dict):
                reference = self._lookup(self._secrets, holder, self._require(target, "secret"))
                if target.get("key"):
                    reference = reference.with_key(target["key"])
            else:
                reference = self._lookup(self._secrets, holder, target)
            bindings.append(SecretBinding(env_var, reference))
        return bindings

    def _template(self, entry: Mapping[str, Any]) -> JobTemplate:
        rid = str(self._require(entry, "id"))
        identity_id = entry.get("identity")
        identity = self._lookup(self._identities, rid, identity_id) if identity_id else None
        return JobTemplate.create(
            ResourceId(rid),
            self._require(entry, "name"),
            self._image(rid, self._require(entry, "image")),
            self._require(entry, "vcpus"),
            self._require(entry, "memory_mib"),
            self._require(entry, "command"),
            self._require(entry, "timeout_seconds"),
            read_only_root_filesystem=self._require(entry, "read_only_root_filesystem"),
            inject_secrets=self._require(entry, "inject_secrets"),
            parameters=self._mapping(entry, "parameters"),
            secret_bindings=self._bindings(rid, self._mapping(entry, "secrets")),
            execution_identity=identity,
        )

    def _queue(self, entry: Mapping[str, Any]) -> DispatchQueue:
        rid = str(self._require(entry, "id"))
        tiers = [
            (
                self._lookup(self._tiers, rid, self._require(assignment, "tier")),
                self._require(assignment, "priority"),
            )
            for assignment in self._mappings(entry, "tiers", required=True)
        ]
        return DispatchQueue.create(
            resource_id=ResourceId(rid),
            name=self._require(entry, "name"),
            tiers=tiers,
            enabled=entry.get("enabled", True),
        )
