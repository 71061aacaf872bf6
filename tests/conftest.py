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

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

import pytest

from revstream.dbc import dbc_enabled

#: Contents of the three-line fixture file, without a trailing newline.
THREE_LINES = b"foo\nbar\nbaz"


@pytest.fixture(autouse=True)
def enforce_contracts() -> Iterator[None]:
    """Evaluate design-by-contract checks in every test."""
    with dbc_enabled():
        yield


@pytest.fixture
def three_line_file(tmp_path: Path) -> Iterator[BinaryIO]:
    """Return ``foo\\nbar\\nbaz`` opened for binary reading at offset 0."""
    path = tmp_path / "lines.txt"
    _ = path.write_bytes(THREE_LINES)
    with path.open("rb") as handle:
        yield handle
