# === NAVMAP v1 ===
# {
#   "module": "tests.conftest",
#   "purpose": "Shared pytest fixtures for suite",
#   "sections": [
#     {
#       "id": "isolated-environment",
#       "name": "isolated_environment",
#       "anchor": "function-isolated-environment",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Pytest Configuration

Adds ``src`` to ``sys.path`` so the suite runs from a plain checkout, and
keeps ``DOCSXREF_*`` variables from the developer's shell out of every test.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Strip ``DOCSXREF_*`` overrides so settings start from defaults."""

    for key in list(os.environ):
        if key.upper().startswith("DOCSXREF_"):
            monkeypatch.delenv(key, raising=False)
