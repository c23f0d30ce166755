from __future__ import annotations

import uuid
from pathlib import Path
from typing import Mapping


class ActionOutputs:
    """Appends run outputs to a GitHub Actions ``$GITHUB_OUTPUT`` file.

    Uses the multi-line ``name<<delimiter`` form, since the issue lists are
    JSON documents. Does nothing when no output file is configured.
    """

    def __init__(self, *, output_file: Path | str | None) -> None:
        self._output_file = Path(output_file) if output_file else None

    def publish(self, outputs: Mapping[str, str]) -> None:
        if self._output_file is None:
            return
        self._output_file.parent.mkdir(parents=True, exist_ok=True)
        with self._output_file.open("a", encoding="utf-8") as fh:
            for name, value in outputs.items():
                delimiter = f"ghadelimiter_{uuid.uuid4()}"
                fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
