"""pytest fixture plugin.

Usage::

    # conftest.py
    pytest_plugins = ["enctextfile._pytest_plugin"]

This makes the ``make_text_file`` fixture available::

    def test_something(make_text_file):
        path = make_text_file(b"\\xef\\xbb\\xbfhi\\n")
        tf = TextFile()
        assert tf.open(path)
"""

from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def make_text_file(tmp_path: Path) -> Callable[..., str]:
    """Factory writing raw bytes to a fresh file under ``tmp_path``.

    Returns the path as ``str``.  Each call creates a new file unless
    ``name`` is given.
    """
    counter = 0

    def _make(data: bytes, name: str | None = None) -> str:
        nonlocal counter
        if name is None:
            counter += 1
            name = f"text{counter}.txt"
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)

    return _make
