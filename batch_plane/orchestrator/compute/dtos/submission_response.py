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

"""Submission response DTO."""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class SubmissionResponse:
    """Response DTO for job submissions.

    Attributes:
        submission_id: Unique submission identifier.
        template_name: Name of the job template.
        template_revision: Revision of the job template.
        queue_name: Name of the dispatch queue.
        command: Command with parameters resolved.
        placement_state: PLACED or QUEUED.
        tier_id: Tier the job landed in, when placed.
        timeout_seconds: Attempt duration enforced by the substrate.
    """

    submission_id: str
    template_name: str
    template_revision: int
    queue_name: str
    command: Tuple[str, ...]
    placement_state: str
    tier_id: Optional[str]
    timeout_seconds: int
