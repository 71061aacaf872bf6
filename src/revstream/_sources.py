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

"""Concrete byte sources.

Provides :class:`MemoryByteSource` for in-memory content and
:class:`FileByteSource` for open binary file objects, plus
:func:`as_byte_source` which picks the right one for a value.
"""

from __future__ import annotations

import io
import os
from collections.abc import Buffer
from dataclasses import dataclass, field
from typing import BinaryIO

from ._protocols import Anchor, ByteSource

__all__ = [
    "FileByteSource",
    "MemoryByteSource",
    "as_byte_source",
]


def _check_offset(offset: int) -> None:
    if offset < 0:
        msg = f"Negative read offset: {offset}"
        raise ValueError(msg)


@dataclass(slots=True)
class MemoryByteSource:
    """ByteSource backed by an in-memory bytes-like object.

    The content is held by reference, not copied. Growing a ``bytearray``
    after construction is visible to later reads; shrinking it voids the
    guarantees a reader relies on.
    """

    _data: Buffer
    _position: int = field(default=0)

    @classmethod
    def from_bytes(cls, content: Buffer, *, position: int = 0) -> MemoryByteSource:
        """Create a source over ``content`` with the cursor at ``position``."""
        source = cls(_data=content)
        _ = source.seek(position, Anchor.START)
        return source

    @property
    def size(self) -> int:
        """Total size in bytes."""
        with memoryview(self._data) as view:
            return view.nbytes

    @property
    def position(self) -> int:
        """Current cursor offset."""
        return self._position

    def read_at(self, buffer: Buffer, offset: int) -> int:
        """Copy bytes starting at ``offset`` into ``buffer``."""
        _check_offset(offset)
        with (
            memoryview(buffer) as raw_target,
            raw_target.cast("B") as target,
            memoryview(self._data) as raw_data,
            raw_data.cast("B") as data,
        ):
            chunk = data[offset : offset + len(target)]
            count = len(chunk)
            target[:count] = chunk
            return count

    def seek(self, offset: int, whence: int = Anchor.START) -> int:
        """Move the cursor and return its new absolute offset."""
        if whence == Anchor.START:
            target = offset
        elif whence == Anchor.CURRENT:
            target = self._position + offset
        elif whence == Anchor.END:
            target = self.size + offset
        else:
            msg = f"Invalid whence value: {whence}"
            raise ValueError(msg)
        if target < 0:
            msg = f"Negative seek position: {target}"
            raise ValueError(msg)
        self._position = target
        return target


@dataclass(slots=True)
class FileByteSource:
    """ByteSource over an open binary file object.

    The file is not owned: closing it remains the caller's job. Positional
    reads go through ``os.pread`` on the file descriptor so the file's cursor
    is never touched. Files without a usable descriptor (``io.BytesIO`` and
    similar) fall back to seek, read, and seek back, which briefly moves the
    cursor and is therefore not safe against concurrent observers.
    """

    _handle: BinaryIO

    @property
    def handle(self) -> BinaryIO:
        """The wrapped file object."""
        return self._handle

    def read_at(self, buffer: Buffer, offset: int) -> int:
        """Fill ``buffer`` from absolute ``offset`` without moving the cursor."""
        _check_offset(offset)
        with memoryview(buffer) as raw_target, raw_target.cast("B") as target:
            fd = self._descriptor()
            if fd is None:
                return self._read_at_via_cursor(target, offset)
            if self._handle.writable():
                self._handle.flush()
            total = 0
            while total < len(target):
                chunk = os.pread(fd, len(target) - total, offset + total)
                if not chunk:
                    break
                target[total : total + len(chunk)] = chunk
                total += len(chunk)
            return total

    def seek(self, offset: int, whence: int = Anchor.START) -> int:
        """Delegate to the file's own ``seek``."""
        return self._handle.seek(offset, whence)

    def _descriptor(self) -> int | None:
        if not hasattr(os, "pread"):  # pragma: no cover - platform specific
            return None
        try:
            return self._handle.fileno()
        except (AttributeError, OSError, ValueError):
            return None

    def _read_at_via_cursor(self, target: memoryview, offset: int) -> int:
        saved = self._handle.tell()
        try:
            _ = self._handle.seek(offset, Anchor.START)
            total = 0
            while total < len(target):
                count = self._handle.readinto(target[total:])
                if not count:
                    break
                total += count
            return total
        finally:
            _ = self._handle.seek(saved, Anchor.START)


def as_byte_source(obj: object) -> ByteSource:
    """Return a :class:`ByteSource` for ``obj`` without performing I/O.

    Accepts an existing ``ByteSource``, a bytes-like object (wrapped in
    :class:`MemoryByteSource` with the cursor at 0), or a seekable binary
    file object (wrapped in :class:`FileByteSource`).

    Raises:
        TypeError: If ``obj`` is none of the above, or is a text stream.
        ValueError: If ``obj`` is a file object that cannot seek.
    """
    if isinstance(obj, ByteSource):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return MemoryByteSource(_data=obj)
    if isinstance(obj, io.TextIOBase):
        msg = "Text streams are not byte sources; open the file in binary mode"
        raise TypeError(msg)
    if hasattr(obj, "seek") and hasattr(obj, "readinto"):
        seekable = getattr(obj, "seekable", None)
        if seekable is not None and not seekable():
            msg = "File object is not seekable"
            raise ValueError(msg)
        return FileByteSource(_handle=obj)  # pyright: ignore[reportArgumentType]
    msg = f"Cannot use {type(obj).__name__} as a byte source"
    raise TypeError(msg)
