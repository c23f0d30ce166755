import os
import sys
from pathlib import Path
import pytest

from dotenv import load_dotenv
load_dotenv()


@pytest.fixture(autouse=True)
def _ensure_src_on_syspath():
    # Add project src/ to sys.path for src-layout imports
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))
    yield


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    # Keep developer and CI settings out of the tests
    for name in ("GITHUB_TOKEN", "GITHUB_REPOSITORY", "GITHUB_OUTPUT"):
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("TRISSUE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TRISSUE_DIRECTORIES__HOME", str(tmp_path / "home"))
    yield


TESTS = Path(__file__).parent

# Layer directory -> marker
LAYER_MARKERS = {
    TESTS / "trissue" / "core": pytest.mark.unit,
    TESTS / "trissue" / "infra": pytest.mark.integration,
    TESTS / "trissue" / "app": pytest.mark.e2e,
}


def pytest_collection_modifyitems(config, items):
    for item in items:
        path = Path(item.path).resolve()
        for layer, marker in LAYER_MARKERS.items():
            if path.is_relative_to(layer.resolve()):
                item.add_marker(marker)
