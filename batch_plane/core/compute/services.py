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

"""Domain services for the compute domain."""

from typing import Mapping, Optional, Tuple

from .entities import JobTemplate
from .entities.job_template import parameter_name
from .exceptions import ValidationError


class ParameterResolver:
    """Domain service resolving ``Ref::<name>`` command arguments.

    This mirrors what the substrate does at submission time, so a caller
    can see the exact command a submission will run.
    """

    @staticmethod
    def resolve(
        template: JobTemplate,
        values: Optional[Mapping[str, str]] = None,
    ) -> Tuple[str, ...]:
        """Resolve a template's command against submitted parameter values.

        Caller values win; absent parameters fall back to the template's
        declared default. Only whole arguments are substituted.

        Args:
            template: Job template to resolve.
            values: Submitted parameter values.

        Returns:
            The resolved command.

        Raises:
            ValidationError: If a submitted parameter is not declared.

        Example:
            >>> template.parameters
            {'MyParam': ''}
            >>> ParameterResolver.resolve(template, {"MyParam": "x"})
            ('run.sh', 'x')
        """
        values = dict(values or {})
        unknown = sorted(set(values) - set(template.parameters))
        if unknown:
            raise ValidationError(
                f"Unknown parameters for template {template.name}: {unknown}",
                resource_id=str(template.resource_id),
            )
        merged = {**template.parameters, **values}
        resolved = []
        for argument in template.command:
            name = parameter_name(argument)
            resolved.append(argument if name is None else str(merged[name]))
        return tuple(resolved)
