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

"""Adapters exposing a :class:`ReverseReader` through the :mod:`io` stack.

Code that consumes ordinary binary streams (``readline``, line iteration,
``shutil.copyfileobj``) can read a source backwards by going through these
adapters instead of calling :meth:`ReverseReader.read` directly.
"""

from __future__ import annotations

import io
from collections.abc import Buffer
from typing import override

from ._reader import ReverseReader
from ._types import ReaderConfig

__all__ = [
    "ReverseRawIO",
    "open_reversed",
]


class ReverseRawIO(io.RawIOBase):
    """Unbuffered, read-only raw stream yielding a source's bytes in reverse.

    ``readinto`` performs one backward read. End-of-stream is reported the
    ``io`` way: the final bytes come back with their count and the next call
    returns 0. Closing the stream does not close the underlying source.
    """

    def __init__(self, reader: ReverseReader) -> None:
        super().__init__()
        self._reader = reader

    @property
    def reader(self) -> ReverseReader:
        """The reader this stream delegates to."""
        return self._reader

    @override
    def readable(self) -> bool:
        return True

    @override
    def readinto(self, buffer: Buffer, /) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        return self._reader.read(buffer).count


def open_reversed(
    source: object,
    *,
    from_end: bool = True,
    buffer_size: int = io.DEFAULT_BUFFER_SIZE,
    config: ReaderConfig | None = None,
) -> io.BufferedReader:
    """Return a buffered binary stream reading ``source`` backwards.

    Args:
        source: Anything :class:`ReverseReader` accepts.
        from_end: Move the cursor to the end of the source first. Pass
            ``False`` to start from wherever the source cursor already is.
        buffer_size: Read-ahead size of the buffered layer.
        config: Options forwarded to the reader.

    The buffered layer reads ahead by up to ``buffer_size`` bytes, so the
    source cursor may be lower than the number of bytes consumed implies.

    Example::

        with open("app.log", "rb") as handle:
            for line in open_reversed(handle):
                print(line[::-1])  # last line first, back in reading order
    """
    reader = ReverseReader(source, config=config)
    if from_end:
        _ = reader.seek_to_end()
    return io.BufferedReader(ReverseRawIO(reader), buffer_size=buffer_size)
