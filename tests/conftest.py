"""Pytest configuration and fixtures for goaster tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from goaster.builder import load_module
from goaster.model import Module


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch):
    """Point the TOML config at a per-test file so ~/.goaster is never read."""
    config_file = tmp_path / "goaster-home" / "config.toml"
    monkeypatch.setattr("goaster.config.CONFIG_FILE", config_file)
    monkeypatch.setattr("goaster.config_manager.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_module_path() -> Path:
    """Get path to the sample Go package."""
    return Path(__file__).parent / "fixtures" / "sample_module"


@pytest.fixture
def sample_module(sample_module_path: Path) -> Module:
    return load_module(sample_module_path)


@pytest.fixture
def shapes(sample_module: Module):
    return sample_module.package("shapes")


@pytest.fixture
def go_module(temp_dir: Path) -> Callable[..., Module]:
    """Write Go sources into a fresh directory and build them.

    Usage: ``go_module(a="package p ...", b="package p ...")`` writes
    ``a.go`` and ``b.go``.
    """

    def _build(**sources: str) -> Module:
        for name, src in sources.items():
            (temp_dir / f"{name}.go").write_text(src, encoding="utf-8")
        return load_module(temp_dir)

    return _build
