"""Import shim for the src/ layout.

The real package lives under `device-trust/src/device_trust/`. This shim lets
`python -m device_trust ...` run from the repo root without setting
PYTHONPATH by extending the package search path to include the src directory.
"""

from __future__ import annotations

from pathlib import Path

_REPO_ROOT = Path(__file__).resolve().parents[1]
_REAL_PKG = _REPO_ROOT / "device-trust" / "src" / "device_trust"
if _REAL_PKG.is_dir():
    __path__.append(str(_REAL_PKG))  # type: ignore[name-defined]

__all__ = [
    "api",
    "cli",
    "config",
    "device",
    "errors",
    "inventory",
    "probes",
    "runtime",
    "trust",
]
