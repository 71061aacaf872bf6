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

"""Base exception hierarchy for :mod:`revstream`."""

from __future__ import annotations

from typing import Literal

SourceOperation = Literal["seek", "read_at"]


class RevstreamError(Exception):
    """Base class for all revstream exceptions.

    Callers can catch every library-specific failure with a single handler
    while standard Python exceptions raised by sources outside of a read call
    (for example from :meth:`ReverseReader.seek_to_end`) propagate unchanged.

    Example:
        Catch any revstream-specific error::

            try:
                result = reader.read(buffer)
            except RevstreamError as e:
                logger.error("Reverse read failed: %s", e)
    """


class SourceError(RevstreamError, OSError):
    """Raised when the underlying byte source fails partway through a read.

    The original exception is chained as ``__cause__``. Because a read may
    fail after some bytes were already delivered, the error records how many
    leading slots of the caller's buffer hold valid data.

    Attributes:
        count: Bytes written into the caller's buffer before the failure.
        operation: The source capability that failed (``"seek"`` or
            ``"read_at"``).
        offset: Cursor offset involved in the failing call, or ``None`` when
            the cursor could not be determined.

    Example:
        Salvaging the bytes delivered before a failure::

            try:
                result = reader.read(buffer)
            except SourceError as e:
                salvage = bytes(buffer[: e.count])
                raise

    Warning:
        No cursor repair is attempted. After a failed cursor step the source
        position is whatever the source left it at.
    """

    def __init__(
        self,
        message: str,
        *,
        count: int,
        operation: SourceOperation,
        offset: int | None = None,
    ) -> None:
        super().__init__(message)
        self.count = count
        self.operation: SourceOperation = operation
        self.offset = offset

    def __reduce__(self) -> tuple[object, ...]:
        return (
            _rebuild_source_error,
            (str(self), self.count, self.operation, self.offset),
        )


class ConcurrentReadError(RevstreamError, RuntimeError):
    """Raised when a reader is entered by a second thread mid-call.

    A :class:`ReverseReader` treats the source cursor as shared mutable
    state and never interleaves two reads on itself. With the default
    ``Contention.REJECT`` policy an overlapping call fails fast with this
    error; ``Contention.SERIALIZE`` makes the caller wait instead.
    """


def _rebuild_source_error(
    message: str, count: int, operation: SourceOperation, offset: int | None
) -> SourceError:
    return SourceError(message, count=count, operation=operation, offset=offset)


__all__ = [
    "ConcurrentReadError",
    "RevstreamError",
    "SourceError",
    "SourceOperation",
]
