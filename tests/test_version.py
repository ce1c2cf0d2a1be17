"""
Tests for version lookup.
"""
import importlib
import importlib.metadata
from unittest.mock import patch

import ledger_sdk
from ledger_sdk import version


def test_version_is_exported():
    assert isinstance(ledger_sdk.__version__, str)
    assert ledger_sdk.__version__ == version.__version__


def test_version_from_pyproject():
    """Without installed metadata the version comes from pyproject.toml"""
    with patch("importlib.metadata.version", side_effect=importlib.metadata.PackageNotFoundError):
        reloaded = importlib.reload(version)
    assert reloaded.__version__ == "0.1.0"
    importlib.reload(version)
