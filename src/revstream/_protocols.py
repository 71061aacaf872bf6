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

"""Protocol definitions for byte sources read by :class:`ReverseReader`.

A byte source is anything offering a positional read that leaves the cursor
alone and a cursor operation that both queries and moves an absolute offset.
Open binary files satisfy the second capability natively; use
:class:`FileByteSource` to supply the first.
"""

from __future__ import annotations

import io
from collections.abc import Buffer
from enum import IntEnum
from typing import Protocol, runtime_checkable

__all__ = [
    "Anchor",
    "ByteSource",
]


class Anchor(IntEnum):
    """Reference point for a cursor operation, numerically equal to ``io.SEEK_*``."""

    START = io.SEEK_SET
    CURRENT = io.SEEK_CUR
    END = io.SEEK_END


@runtime_checkable
class ByteSource(Protocol):
    """Random-access byte source with a shared cursor.

    Conceptually an array of ``size`` bytes with a cursor in ``[0, size]``.
    The cursor belongs to the source, not to any reader wrapping it, and may
    be observed or moved by other holders of the same source.

    Example::

        source = MemoryByteSource.from_bytes(b"foo\\nbar\\nbaz")
        scratch = bytearray(3)
        source.read_at(scratch, 4)  # -> 3, scratch == b"bar", cursor unchanged
        source.seek(0, Anchor.END)  # -> 11
    """

    def read_at(self, buffer: Buffer, offset: int) -> int:
        """Fill ``buffer`` with bytes starting at absolute ``offset``.

        Args:
            buffer: Writable bytes-like object receiving the data.
            offset: Absolute byte offset, ``>= 0``.

        Returns:
            Number of bytes written to the front of ``buffer``. A count
            smaller than ``len(buffer)`` means the source ended.

        Raises:
            OSError: If the underlying storage fails.
        """
        ...

    def seek(self, offset: int, whence: int = Anchor.START) -> int:
        """Move the cursor relative to ``whence`` and return the new offset.

        ``seek(0, Anchor.CURRENT)`` queries the cursor without moving it.

        Raises:
            ValueError: If ``whence`` is invalid or the target is negative.
            OSError: If the underlying storage fails.
        """
        ...
