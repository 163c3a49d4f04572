from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_src_on_path() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    src = repo_root / "device-trust" / "src"
    src_str = str(src)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)

    # Scripted device fakes shared by every unit test package.
    helpers = Path(__file__).resolve().parent / "helpers"
    helpers_str = str(helpers)
    if helpers.is_dir() and helpers_str not in sys.path:
        sys.path.insert(0, helpers_str)


_ensure_src_on_path()

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def fixture_text():
    def _load(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _load
