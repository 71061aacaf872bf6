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

"""Read byte sources in reverse.

:class:`ReverseReader` wraps anything offering a positional read and a cursor
(see :class:`ByteSource`) and yields its bytes from the cursor back toward
offset zero, keeping the source cursor in step with every byte delivered.

Example usage::

    from revstream import ReverseReader

    with open("app.log", "rb") as handle:
        reader = ReverseReader(handle)
        reader.seek_to_end()
        buffer = bytearray(4096)
        result = reader.read(buffer)
        tail = bytes(buffer[: result.count])[::-1]

For line-oriented consumers, :func:`open_reversed` returns an
``io.BufferedReader`` whose lines arrive last-first, each byte-reversed.
"""

from __future__ import annotations

from ._protocols import Anchor, ByteSource
from ._reader import ReverseReader
from ._sources import FileByteSource, MemoryByteSource, as_byte_source
from ._stream import ReverseRawIO, open_reversed
from ._types import (
    DEFAULT_CHUNK_SIZE,
    Contention,
    ReaderConfig,
    ReadMode,
    ReadResult,
)
from .errors import ConcurrentReadError, RevstreamError, SourceError
from .log import configure_logging

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "Anchor",
    "ByteSource",
    "ConcurrentReadError",
    "Contention",
    "FileByteSource",
    "MemoryByteSource",
    "ReadMode",
    "ReadResult",
    "ReaderConfig",
    "ReverseRawIO",
    "ReverseReader",
    "RevstreamError",
    "SourceError",
    "as_byte_source",
    "configure_logging",
    "open_reversed",
]
