from __future__ import annotations

import shutil
import sys
from pathlib import Path

import pytest

# pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from linkchain.core.config import Config, GenesisConfig  # noqa: E402
from linkchain.core.ledger import Ledger  # noqa: E402
from linkchain.core.metrics import MetricsRegistry  # noqa: E402
from linkchain.core.models import Block  # noqa: E402
from linkchain.p2p.protocol import ReplicationProtocol  # noqa: E402
from linkchain.p2p.registry import PeerRegistry  # noqa: E402


@pytest.fixture()
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture()
def test_config(temp_dir: Path) -> Config:
    """Config loaded from a copy of the repo defaults."""

    cfg_dst_dir = temp_dir / "config"
    cfg_dst_dir.mkdir(parents=True, exist_ok=True)
    shutil.copy2(REPO_ROOT / "config" / "default.yaml", cfg_dst_dir / "default.yaml")
    return Config.from_yaml(cfg_dst_dir / "default.yaml")


@pytest.fixture()
def genesis() -> Block:
    return GenesisConfig().block()


@pytest.fixture()
def metrics() -> MetricsRegistry:
    return MetricsRegistry()


@pytest.fixture()
def ledger(genesis: Block, metrics: MetricsRegistry) -> Ledger:
    return Ledger(genesis, metrics=metrics)


@pytest.fixture()
def registry(metrics: MetricsRegistry) -> PeerRegistry:
    return PeerRegistry(metrics=metrics)


@pytest.fixture()
def protocol(ledger: Ledger, registry: PeerRegistry) -> ReplicationProtocol:
    return ReplicationProtocol(ledger, registry)


@pytest.fixture(scope="module")
def anyio_backend() -> str:
    return "asyncio"
