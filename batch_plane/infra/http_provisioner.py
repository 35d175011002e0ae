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

"""Provisioner that hands rendered graphs to a reconciliation service."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from batch_plane.core.compute.ports import Diagnostic, ProvisioningResult
from batch_plane.core.compute.rendered import RenderedGraph
from batch_plane.core.compute.value_objects import EnvironmentTarget

from .exceptions import ProvisionerError

logger = logging.getLogger(__name__)


class HttpProvisioner:
    """POSTs rendered graphs to ``{base_url}/deployments``.

    A 2xx response means the service accepted the graph. A 422 response
    carries per-resource diagnostics and becomes a failed result. Any
    other failure raises ``ProvisionerError``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize the provisioner.

        Args:
            base_url: Base URL of the reconciliation service.
            timeout: Request timeout in seconds.
            client: Optional preconfigured client, mainly for tests.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def provision(
        self,
        stack_name: str,
        graph: RenderedGraph,
        environment: EnvironmentTarget,
    ) -> ProvisioningResult:
        """Submit the graph and map the service response.

        Raises:
            ProvisionerError: On transport errors or unexpected statuses.
        """
        payload = {
            "stackName": stack_name,
            "environment": {
                "account": environment.account,
                "region": environment.region,
            },
            "template": graph.to_template(),
        }
        url = f"{self.base_url}/deployments"
        logger.info("Submitting %s to %s", stack_name, url)
        try:
            response = self._post(url, payload)
        except httpx.HTTPError as exc:
            logger.error("Provisioner request for %s failed: %s", stack_name, exc)
            raise ProvisionerError(f"Provisioner request failed: {exc}") from exc

        if response.status_code == 422:
            return ProvisioningResult(
                succeeded=False,
                diagnostics=self._diagnostics(response),
            )
        if response.is_error:
            logger.error(
                "Provisioner returned %d for %s",
                response.status_code,
                stack_name,
            )
            raise ProvisionerError(
                f"Provisioner returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return ProvisioningResult(
            succeeded=True,
            location=response.headers.get("location"),
        )

    def _post(self, url: str, payload: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return self._client.post(url, json=payload, timeout=self.timeout)
        with httpx.Client() as client:
            return client.post(url, json=payload, timeout=self.timeout)

    @staticmethod
    def _diagnostics(response: httpx.Response) -> List[Diagnostic]:
        try:
            body = response.json()
        except ValueError:
            return [Diagnostic(resource_id=None, message=response.text or "rejected")]
        entries = body.get("diagnostics", []) if isinstance(body, dict) else []
        diagnostics = [
            Diagnostic(
                resource_id=entry.get("resourceId"),
                message=str(entry.get("message", "")),
            )
            for entry in entries
            if isinstance(entry, dict)
        ]
        return diagnostics or [Diagnostic(resource_id=None, message="rejected")]
