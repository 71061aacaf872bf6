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

"""Value types and configuration for reverse reads."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "Contention",
    "ReadMode",
    "ReadResult",
    "ReaderConfig",
]

#: Default chunk size for iteration (64KB).
DEFAULT_CHUNK_SIZE: Final[int] = 65_536


@dataclass(slots=True, frozen=True)
class ReadResult:
    """Outcome of a single read call.

    Attributes:
        count: Number of bytes written to the front of the caller's buffer.
        eof: True when the read direction is exhausted. End-of-stream is
            reported on the same call as the final bytes, so ``count`` may be
            positive when ``eof`` is set.

    Example::

        buffer = bytearray(4096)
        while True:
            result = reader.read(buffer)
            consume(buffer[: result.count])
            if result.eof:
                break
    """

    count: int
    eof: bool = False

    @property
    def ok(self) -> bool:
        """True when more bytes may follow in the same direction."""
        return not self.eof


class ReadMode(Enum):
    """How a backward read drives the source.

    ``STEPWISE`` issues one ``-1`` cursor step and one single-byte positional
    read per byte, so the cursor is coherent with the bytes delivered even if
    the source fails partway. ``BATCHED`` issues one positional read of the
    whole range followed by one cursor step of ``-n``.
    """

    STEPWISE = "stepwise"
    BATCHED = "batched"


class Contention(Enum):
    """Policy for a second thread entering a reader that is mid-call."""

    REJECT = "reject"
    SERIALIZE = "serialize"


@dataclass(slots=True, frozen=True)
class ReaderConfig:
    """Construction-time options for :class:`ReverseReader`."""

    mode: ReadMode = ReadMode.STEPWISE
    contention: Contention = Contention.REJECT
