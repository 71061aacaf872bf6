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

"""Reverse byte reader over a positional, seekable source.

:class:`ReverseReader` turns any :class:`ByteSource` into a stream that yields
bytes from the cursor back toward offset zero. Every byte delivered moves the
source cursor, so other holders of the same handle always observe a position
consistent with what the reader has produced.

Example::

    with open("app.log", "rb") as handle:
        reader = ReverseReader(handle)
        reader.seek_to_end()
        for chunk in reader.chunks(4096):
            scan(chunk)  # bytes of app.log, last byte first
"""

from __future__ import annotations

import threading
from collections.abc import Buffer, Iterator
from contextlib import contextmanager
from typing import BinaryIO

from ._protocols import Anchor, ByteSource
from ._sources import as_byte_source
from ._types import (
    DEFAULT_CHUNK_SIZE,
    Contention,
    ReaderConfig,
    ReadMode,
    ReadResult,
)
from .dbc import ContractResult, ensure
from .errors import ConcurrentReadError, SourceError, SourceOperation
from .log import StructuredLogger, get_logger

__all__ = ["ReverseReader"]

_logger: StructuredLogger = get_logger(
    __name__, context={"component": "reverse_reader"}
)


def _count_within_buffer(
    reader: ReverseReader, buffer: Buffer, *, result: ReadResult
) -> ContractResult:
    with memoryview(buffer) as view:
        capacity = view.nbytes
    if 0 <= result.count <= capacity:
        return True
    return (False, f"count {result.count} outside [0, {capacity}]")


class ReverseReader:
    """Reads a byte source backwards from its current cursor.

    The reader stores no position of its own: each call re-queries the
    source cursor, so repositioning the source between calls is honoured.
    A fresh reader over a source at offset 0 is already exhausted; call
    :meth:`seek_to_end` (or seek the source directly) before reading.

    The reader never closes the source. Several readers may wrap the same
    source, but they share its single cursor.

    A single reader must not be entered by two threads at once. With the
    default ``Contention.REJECT`` policy an overlapping call raises
    :class:`ConcurrentReadError`; ``Contention.SERIALIZE`` makes it wait.
    Neither policy synchronizes with other users of the source itself.
    """

    __slots__ = ("_config", "_lock", "_source")

    def __init__(
        self,
        source: ByteSource | Buffer | BinaryIO,
        *,
        config: ReaderConfig | None = None,
    ) -> None:
        self._source: ByteSource = as_byte_source(source)
        self._config = config if config is not None else ReaderConfig()
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        name = type(self).__name__
        return f"{name}(source={self._source!r}, config={self._config!r})"

    @property
    def source(self) -> ByteSource:
        """The wrapped byte source."""
        return self._source

    @property
    def config(self) -> ReaderConfig:
        return self._config

    @ensure(_count_within_buffer)
    def read(self, buffer: Buffer) -> ReadResult:
        """Fill ``buffer`` with bytes preceding the cursor, nearest first.

        After the call the cursor sits ``result.count`` bytes lower. When the
        cursor reaches offset 0 the result carries ``eof=True``, on the same
        call that delivered the final bytes.

        Args:
            buffer: Writable bytes-like object. An empty buffer returns
                ``ReadResult(0)`` without touching the source.

        Raises:
            TypeError: If ``buffer`` is read-only.
            SourceError: If the source fails; ``count`` says how many leading
                bytes of ``buffer`` are valid.
            ConcurrentReadError: If another thread is inside this reader.
        """
        with memoryview(buffer) as raw, raw.cast("B") as target:
            if not len(target):
                return ReadResult(0)
            _require_writable(target)
            with self._guard("read"):
                if self._config.mode is ReadMode.BATCHED:
                    return self._read_batched(target)
                return self._read_stepwise(target)

    read_backward = read

    @ensure(_count_within_buffer)
    def read_forward(self, buffer: Buffer) -> ReadResult:
        """Fill ``buffer`` with bytes following the cursor and advance it.

        This undoes a backward read: a backward read of ``k`` bytes followed
        by a forward read into a ``k``-byte buffer leaves the cursor where it
        started, with the forward buffer holding the same bytes in file order.

        Raises:
            TypeError: If ``buffer`` is read-only.
            SourceError: If the source fails.
            ConcurrentReadError: If another thread is inside this reader.
        """
        with memoryview(buffer) as raw, raw.cast("B") as target:
            if not len(target):
                return ReadResult(0)
            _require_writable(target)
            with self._guard("read_forward"):
                position = self._move(0, count=0, offset=None)
                count = self._read_at(target, position, count=0)
                if count:
                    _ = self._move(count, count=count, offset=position)
                return ReadResult(count, eof=count < len(target))

    def seek_to_end(self) -> int:
        """Move the cursor to the end of the source and return the offset.

        Source errors propagate unchanged.
        """
        with self._guard("seek_to_end"):
            offset = self._source.seek(0, Anchor.END)
        _logger.debug(
            "Moved cursor to end of source.",
            event="reverse_reader.seek_to_end",
            context={"offset": offset},
        )
        return offset

    def seek_to_start(self) -> int:
        """Move the cursor to offset 0 and return it.

        Source errors propagate unchanged.
        """
        with self._guard("seek_to_start"):
            offset = self._source.seek(0, Anchor.START)
        _logger.debug(
            "Moved cursor to start of source.",
            event="reverse_reader.seek_to_start",
            context={"offset": offset},
        )
        return offset

    def chunks(self, size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """Iterate backwards over the source in chunks of at most ``size`` bytes.

        Each chunk is already reversed. Iteration stops at offset 0.

        Raises:
            ValueError: If ``size`` is less than 1.
        """
        if size < 1:
            msg = f"Chunk size must be positive, got {size}"
            raise ValueError(msg)
        return self._iter_chunks(size)

    def __iter__(self) -> Iterator[bytes]:
        """Iterate over chunks of default size (64KB)."""
        return self.chunks(DEFAULT_CHUNK_SIZE)

    def _iter_chunks(self, size: int) -> Iterator[bytes]:
        buffer = bytearray(size)
        while True:
            result = self.read(buffer)
            if result.count:
                yield bytes(buffer[: result.count])
            if result.eof:
                return

    def _read_stepwise(self, target: memoryview) -> ReadResult:
        offset = self._move(0, count=0, offset=None)
        count = 0
        for index in range(len(target)):
            if offset == 0:
                return ReadResult(count, eof=True)
            offset = self._move(-1, count=count, offset=offset)
            if not self._read_at(target[index : index + 1], offset, count=count):
                return ReadResult(count, eof=True)
            count += 1
        return ReadResult(count)

    def _read_batched(self, target: memoryview) -> ReadResult:
        position = self._move(0, count=0, offset=None)
        size = min(len(target), position)
        if not size:
            return ReadResult(0, eof=True)
        start = position - size
        scratch = bytearray(size)
        read = self._read_at(scratch, start, count=0)
        if read < size:
            msg = (
                f"Source returned {read} of {size} bytes at offset {start}; "
                "it is shorter than its cursor"
            )
            raise SourceError(msg, count=0, operation="read_at", offset=start)
        scratch.reverse()
        target[:size] = scratch
        _ = self._move(-size, count=size, offset=position)
        return ReadResult(size, eof=size < len(target))

    def _move(self, delta: int, *, count: int, offset: int | None) -> int:
        try:
            return self._source.seek(delta, Anchor.CURRENT)
        except Exception as exc:
            raise _source_failure("seek", exc, count=count, offset=offset) from exc

    def _read_at(self, target: Buffer, offset: int, *, count: int) -> int:
        try:
            return self._source.read_at(target, offset)
        except Exception as exc:
            raise _source_failure("read_at", exc, count=count, offset=offset) from exc

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        if self._config.contention is Contention.SERIALIZE:
            _ = self._lock.acquire()
        elif not self._lock.acquire(blocking=False):
            msg = f"ReverseReader.{operation} called while another call is in progress"
            raise ConcurrentReadError(msg)
        try:
            yield
        finally:
            self._lock.release()


def _require_writable(target: memoryview) -> None:
    if target.readonly:
        raise TypeError("Read buffer must be writable")


def _source_failure(
    operation: SourceOperation,
    exc: Exception,
    *,
    count: int,
    offset: int | None,
) -> SourceError:
    _logger.debug(
        "Byte source failed during read.",
        event="reverse_reader.source_error",
        context={
            "operation": operation,
            "count": count,
            "offset": offset,
            "error": repr(exc),
        },
    )
    msg = f"Byte source {operation} failed after {count} byte(s): {exc}"
    return SourceError(msg, count=count, operation=operation, offset=offset)
