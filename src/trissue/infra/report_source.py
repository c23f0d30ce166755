from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..core.domain.exceptions import ReportUnreadableError


class JsonFileReportSource:
    """Loads a Trivy JSON report from disk."""

    def __init__(self, *, path: Path | str | None) -> None:
        self._path = Path(path) if path else None

    def load(self) -> Any:
        if self._path is None:
            raise ReportUnreadableError("<unset>", "No report file configured")
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise ReportUnreadableError(str(self._path), f"Cannot read report ({e.strerror or e})") from e
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ReportUnreadableError(str(self._path), f"Report is not valid JSON ({e.msg})") from e
