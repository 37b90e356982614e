"""Infrastructure adapter for summary export targets."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def save_report_json(path: Path, summary: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")
