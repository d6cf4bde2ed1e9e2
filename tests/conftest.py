# tests/conftest.py
# Put src/ on sys.path so `import textree` works from a plain checkout,
# without installing the package first.

import sys
import pathlib

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_STR = str(ROOT / "src")

if SRC_STR not in sys.path:
    sys.path.insert(0, SRC_STR)

# Sanity check: make sure the package is importable from src/
try:
    import textree  # noqa: F401
except Exception as e:
    has_pkg = (ROOT / "src" / "textree" / "__init__.py").is_file()
    raise RuntimeError(
        f"Failed to import 'textree' from {SRC_STR}. "
        f"src/textree/__init__.py exists: {has_pkg}"
    ) from e


@pytest.fixture
def clean_env(monkeypatch):
    """Drop TEXTREE_* variables so option loading sees defaults."""
    for key in ("TEXTREE_STRICT", "TEXTREE_MAX_DEPTH"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch
