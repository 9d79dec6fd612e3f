"""Shared pytest fixtures for lutpack tests."""
import logging
import textwrap
from itertools import product
from pathlib import Path
from typing import Callable, List

import pytest

from lutpack.utils import logging as lutpack_logging


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any configure_logging() call so caplog keeps seeing lutpack records."""
    yield
    root_logger = logging.getLogger("lutpack")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    for name, logger in logging.root.manager.loggerDict.items():
        if name.startswith("lutpack.") and isinstance(logger, logging.Logger):
            logger.setLevel(logging.NOTSET)
    lutpack_logging._log_config = None
    lutpack_logging._configured_loggers.clear()


@pytest.fixture
def isolated_config(tmp_path, monkeypatch) -> Path:
    """Point user and project config lookups at an empty temp directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    return home


@pytest.fixture
def write_lut(tmp_path) -> Callable[[str, str], Path]:
    """Write dedented LUT text to a file under tmp_path."""
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def identity_rows() -> Callable[[int], List[str]]:
    """Identity .cube rows for an N^3 table, red changing fastest."""
    def _rows(size: int) -> List[str]:
        step = 1.0 / (size - 1)
        return [
            f"{r * step:.6f} {g * step:.6f} {b * step:.6f}"
            for b, g, r in product(range(size), repeat=3)
        ]
    return _rows


@pytest.fixture
def identity_cube_2(write_lut, identity_rows) -> Path:
    """Minimal 2x2x2 identity .cube file."""
    body = "\n".join(["# identity", "LUT_3D_SIZE 2", ""] + identity_rows(2))
    return write_lut("identity.cube", body + "\n")


@pytest.fixture
def sample_3dl(write_lut) -> Path:
    """4x4x4 .3dl file: row 1 is white, every other row black."""
    rows = ["4096 4096 4096" if i == 1 else "0 0 0" for i in range(64)]
    body = "\n".join(["# sample", "Mesh 0 12", "0 1365 2730 4095"] + rows)
    return write_lut("sample.3dl", body + "\n")
