import os
import pytest

from scanner.blackboard import Blackboard
from scanner.module import EntropyModule
from scanner.pipeline import FilePipeline


class _TestConfig:
    LOG_DIR = ""
    REPORT_DIR = ""
    DASHBOARD_HOST = "127.0.0.1"
    DASHBOARD_PORT = 5000
    FILE_BUFFER_SIZE = 8193
    MODULE_NAME = "EntropyModule"
    ENTROPY_ATTRIBUTE_TYPE = "entropy"
    ENTROPY_LABEL = "Entropy"
    SCAN_WORKERS = 1
    MAX_ATTRIBUTES = 10000


@pytest.fixture
def mock_config(tmp_path):
    cfg = _TestConfig()
    cfg.LOG_DIR = str(tmp_path / "logs")
    cfg.REPORT_DIR = str(tmp_path / "reports")
    return cfg


@pytest.fixture
def blackboard():
    return Blackboard()


@pytest.fixture
def module(blackboard, mock_config):
    return EntropyModule(blackboard, cfg=mock_config)


@pytest.fixture
def pipeline(module, mock_config):
    p = FilePipeline(module, cfg=mock_config)
    p.start()
    return p


@pytest.fixture
def sample_dir(tmp_path):
    root = tmp_path / "samples"
    root.mkdir()
    files = {
        "zeros.bin": b"\x00" * 4096,
        "all_bytes.bin": bytes(range(256)),
        "notes.txt": b"Meeting notes from the weekly standup session",
        "empty.dat": b"",
        "random.bin": os.urandom(4096),
    }
    for name, content in files.items():
        (root / name).write_bytes(content)

    nested = root / "nested"
    nested.mkdir()
    (nested / "config.yaml").write_bytes(b"server:\n  host: 0.0.0.0\n  port: 8080\n")
    return root
