"""
Shared test fixtures for ascii-points tests.

Point files are synthetic and written to ``tmp_path`` by the
``write_points`` fixture, so no input files are needed on disk.
"""

from pathlib import Path

import pytest

from ascii_points.schema import FieldDescriptor, Schema

# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------
XYZ_CSV = "1,2,3\n4,5,6\n7,8,9\n"

XYZI_SPACED = """\
0.5 1.5 2.5 10
-1.0 -2.0 -3.0 20

3e2 4E-1 .5 30
"""


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def xyz_schema() -> Schema:
    return Schema([
        FieldDescriptor("x", "float32"),
        FieldDescriptor("y", "float32"),
        FieldDescriptor("z", "float32"),
    ])


@pytest.fixture()
def write_points(tmp_path: Path):
    """Factory: write text (or bytes) to a file under tmp_path and return its path."""

    def _write(content: str | bytes, name: str = "points.txt") -> Path:
        path = tmp_path / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode("utf-8"))
        return path

    return _write


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (end-to-end reads of synthetic files)",
    )
