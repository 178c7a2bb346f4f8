from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from minigroovy.utils import PARSE_TRACE_ENV, PY_TRACE_ENV


@pytest.fixture(autouse=True)
def _quiet_debug_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Debug toggles from the developer's shell must not leak into assertions on stderr."""
    monkeypatch.setenv(PY_TRACE_ENV, "0")
    monkeypatch.setenv(PARSE_TRACE_ENV, "0")


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Fail fast if pytest ever generates duplicate node IDs."""
    del session
    del config

    seen: Dict[str, int] = {}
    duplicates: List[str] = []
    for item in items:
        if item.nodeid in seen:
            duplicates.append(item.nodeid)
            continue
        seen[item.nodeid] = 1

    if duplicates:
        lines = "\n".join(f"- {nodeid}" for nodeid in sorted(set(duplicates)))
        raise pytest.UsageError(f"Duplicate pytest nodeids detected:\n{lines}")
