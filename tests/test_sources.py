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

"""Tests for the concrete byte sources and source coercion."""

from __future__ import annotations

import io
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

import pytest

from revstream import (
    Anchor,
    ByteSource,
    FileByteSource,
    MemoryByteSource,
    as_byte_source,
)
from tests.helpers.sources import ByteSourceValidationSuite, SourceFactory


class TestMemoryByteSource(ByteSourceValidationSuite):
    """Protocol compliance and specifics of MemoryByteSource."""

    @pytest.fixture
    def make_source(self) -> SourceFactory:
        return MemoryByteSource.from_bytes

    def test_from_bytes_sets_position(self) -> None:
        """from_bytes should place the cursor where asked."""
        source = MemoryByteSource.from_bytes(b"hello", position=3)
        assert source.position == 3
        assert source.size == 5

    def test_negative_seek_raises(self) -> None:
        """Seeking before offset 0 should raise ValueError."""
        source = MemoryByteSource.from_bytes(b"hello")
        with pytest.raises(ValueError, match="Negative seek"):
            source.seek(-1, Anchor.CURRENT)
        assert source.position == 0

    def test_invalid_whence_raises(self) -> None:
        """seek with an unknown anchor should raise ValueError."""
        source = MemoryByteSource.from_bytes(b"hello")
        with pytest.raises(ValueError, match="whence"):
            source.seek(0, 99)

    def test_seek_past_end_is_allowed(self) -> None:
        """Like io.BytesIO, the cursor may sit beyond the end."""
        source = MemoryByteSource.from_bytes(b"hello")
        assert source.seek(3, Anchor.END) == 8
        assert source.position == 8

    def test_negative_read_offset_raises(self) -> None:
        """read_at should reject negative offsets."""
        source = MemoryByteSource.from_bytes(b"hello")
        with pytest.raises(ValueError, match="Negative read offset"):
            source.read_at(bytearray(1), -1)

    def test_read_only_buffer_raises(self) -> None:
        """read_at into immutable bytes should fail."""
        source = MemoryByteSource.from_bytes(b"hello")
        with pytest.raises(TypeError):
            source.read_at(b"xx", 0)

    def test_content_is_held_by_reference(self) -> None:
        """Growing a bytearray should be visible to the source."""
        content = bytearray(b"abc")
        source = MemoryByteSource.from_bytes(content)
        content.extend(b"def")
        assert source.size == 6
        assert source.seek(0, Anchor.END) == 6

    def test_multibyte_memoryview_sized_in_bytes(self) -> None:
        """Sizes and reads should be in bytes regardless of item size."""
        view = memoryview(bytearray(8)).cast("I")
        source = MemoryByteSource.from_bytes(view)
        assert source.size == 8
        assert source.read_at(bytearray(16), 0) == 8


class TestFileByteSource(ByteSourceValidationSuite):
    """Protocol compliance of FileByteSource over real files."""

    @pytest.fixture
    def make_source(self, tmp_path: Path) -> Iterator[SourceFactory]:
        handles: list[BinaryIO] = []

        def factory(content: bytes) -> ByteSource:
            path = tmp_path / f"source-{len(handles)}.bin"
            _ = path.write_bytes(content)
            handle = path.open("rb")
            handles.append(handle)
            return FileByteSource(handle)

        yield factory
        for handle in handles:
            handle.close()

    def test_read_at_leaves_file_cursor_alone(self, tmp_path: Path) -> None:
        """pread-based reads should not disturb the file's own position."""
        path = tmp_path / "data.bin"
        _ = path.write_bytes(b"0123456789")
        with path.open("rb") as handle:
            _ = handle.seek(7)
            source = FileByteSource(handle)
            buffer = bytearray(4)
            assert source.read_at(buffer, 1) == 4
            assert bytes(buffer) == b"1234"
            assert handle.tell() == 7
            assert handle.read() == b"789"

    def test_pending_writes_are_visible(self, tmp_path: Path) -> None:
        """Buffered writes should be flushed before a positional read."""
        path = tmp_path / "data.bin"
        with path.open("w+b") as handle:
            _ = handle.write(b"fresh bytes")
            source = FileByteSource(handle)
            buffer = bytearray(5)
            assert source.read_at(buffer, 0) == 5
            assert bytes(buffer) == b"fresh"

    def test_does_not_close_handle(self, tmp_path: Path) -> None:
        """Dropping the source should leave the file open."""
        path = tmp_path / "data.bin"
        _ = path.write_bytes(b"abc")
        with path.open("rb") as handle:
            source = FileByteSource(handle)
            assert source.handle is handle
            del source
            assert not handle.closed


class TestFileByteSourceWithoutDescriptor(ByteSourceValidationSuite):
    """FileByteSource over in-memory file objects that have no descriptor."""

    @pytest.fixture
    def make_source(self) -> SourceFactory:
        return lambda content: FileByteSource(io.BytesIO(content))

    def test_cursor_restored_after_read(self) -> None:
        """The fallback path should put the cursor back where it was."""
        handle = io.BytesIO(b"0123456789")
        _ = handle.seek(2)
        source = FileByteSource(handle)
        buffer = bytearray(3)
        assert source.read_at(buffer, 6) == 3
        assert bytes(buffer) == b"678"
        assert handle.tell() == 2


class _Unseekable(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def readinto(self, buffer: object, /) -> int:
        return 0


class TestAsByteSource:
    """Tests for as_byte_source coercion."""

    def test_existing_source_returned_unchanged(self) -> None:
        """A value already satisfying ByteSource should pass through."""
        source = MemoryByteSource.from_bytes(b"abc")
        assert as_byte_source(source) is source

    @pytest.mark.parametrize(
        "content", [b"abc", bytearray(b"abc"), memoryview(b"abc")]
    )
    def test_bytes_like_wrapped_in_memory_source(self, content: object) -> None:
        """Bytes-like values should become a MemoryByteSource at offset 0."""
        source = as_byte_source(content)
        assert isinstance(source, MemoryByteSource)
        assert source.position == 0
        assert source.size == 3

    def test_bytes_io_wrapped_in_file_source(self) -> None:
        """Binary file objects should become a FileByteSource."""
        handle = io.BytesIO(b"abc")
        source = as_byte_source(handle)
        assert isinstance(source, FileByteSource)
        assert source.handle is handle

    def test_real_file_wrapped_in_file_source(
        self, three_line_file: BinaryIO
    ) -> None:
        """Open files should be wrapped without any I/O."""
        source = as_byte_source(three_line_file)
        assert isinstance(source, FileByteSource)
        assert three_line_file.tell() == 0

    def test_text_stream_rejected(self) -> None:
        """Text streams should be rejected with a hint."""
        with pytest.raises(TypeError, match="binary mode"):
            as_byte_source(io.StringIO("abc"))

    def test_unseekable_stream_rejected(self) -> None:
        """File objects that cannot seek should be rejected."""
        with pytest.raises(ValueError, match="not seekable"):
            as_byte_source(_Unseekable())

    def test_arbitrary_object_rejected(self) -> None:
        """Unrelated values should raise TypeError."""
        with pytest.raises(TypeError, match="int"):
            as_byte_source(42)
