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

"""Submission id issuing.

Submission ids are UUID v7 values whose 12-bit ``rand_a`` field holds a
sequence number, so ids issued by one process sort in issue order even
when several submissions land in the same millisecond or the wall clock
steps backwards.
"""

import os
import threading
import time
import uuid
from typing import Callable, Optional

from batch_plane.core.compute.ports import SubmissionIdGenerator
from batch_plane.core.compute.value_objects import SubmissionId

SEQUENCE_BITS = 12
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1


class SequencedSubmissionIds(SubmissionIdGenerator):
    """Issue strictly increasing submission ids.

    Attributes:
        clock_ms: Callable returning the current Unix time in milliseconds.
    """

    def __init__(self, clock_ms: Optional[Callable[[], int]] = None) -> None:
        self.clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._lock = threading.Lock()
        self._last_ms = -1
        self._sequence = 0

    def generate(self) -> SubmissionId:
        """Issue the next submission id."""
        with self._lock:
            timestamp_ms, sequence = self._advance()
        return SubmissionId(str(self._pack(timestamp_ms, sequence)))

    def _advance(self):
        now = self.clock_ms()
        if now > self._last_ms:
            self._last_ms = now
            self._sequence = 0
        elif self._sequence < MAX_SEQUENCE:
            self._sequence += 1
        else:
            # Sequence exhausted for this millisecond: borrow the next one.
            self._last_ms += 1
            self._sequence = 0
        return self._last_ms, self._sequence

    @staticmethod
    def _pack(timestamp_ms: int, sequence: int) -> uuid.UUID:
        tail = int.from_bytes(os.urandom(8), "big") & ((1 << 62) - 1)
        value = (timestamp_ms & ((1 << 48) - 1)) << 80
        value |= 0x7 << 76
        value |= sequence << 64
        value |= 0b10 << 62
        value |= tail
        return uuid.UUID(int=value)
