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

LOAM_ENV_VARS = ("LOAM_MAX_CALL_DEPTH", "LOAM_DEBUG_PY_TRACE", "LOAM_LOG_LEVEL")


@pytest.fixture(autouse=True)
def _isolated_loam_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's LOAM_* settings from leaking into runner and config tests."""
    for name in LOAM_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Fail fast if two scenarios end up with the same node id."""
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
        raise pytest.UsageError(f"Duplicate scenario ids detected during collection:\n{lines}")
