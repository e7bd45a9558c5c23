"""Shared fixtures for the dircompare test suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from PyQt6.QtCore import QCoreApplication


def make_tree(root: Path, layout: dict) -> Path:
    """
    Create files and folders under ``root`` from a nested dict.

    String values become file contents (bytes are written as-is);
    dict values become subdirectories.
    """
    root.mkdir(parents=True, exist_ok=True)
    for name, value in layout.items():
        path = root / name
        if isinstance(value, dict):
            make_tree(path, value)
        elif isinstance(value, bytes):
            path.write_bytes(value)
        else:
            path.write_text(value, encoding='utf-8')
    return root


@pytest.fixture(scope="session")
def qapp():
    """A Qt core application for signal delivery."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv[:1])
    yield app


@pytest.fixture
def left_right(tmp_path):
    """Two sibling roots, ``new`` (left) and ``old`` (right)."""
    return tmp_path / "new", tmp_path / "old"
