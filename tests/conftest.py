from pathlib import Path
from typing import List, Optional

import pytest

from courier.models.schemas import RemoteDestination, RemoteTarget, TransferOutcome
from domains.table_upload.pipeline import UploadPipeline
from domains.table_upload.templates import load_templates


class FakeTransfer:
    """Records transfer calls and returns a fixed outcome."""

    def __init__(self, outcome: Optional[TransferOutcome] = None):
        self.outcome = outcome or TransferOutcome.success()
        self.calls: List[tuple[Path, RemoteTarget]] = []

    def __call__(self, local_path: Path, target: RemoteTarget) -> TransferOutcome:
        self.calls.append((local_path, target))
        return self.outcome


def read_audit(directory: Path) -> List[str]:
    log_path = directory / "upload.log"
    if not log_path.exists():
        return []
    return log_path.read_text(encoding="utf-8").splitlines()


@pytest.fixture
def template_dir(tmp_path):
    directory = tmp_path / "templates"
    directory.mkdir()
    (directory / "orders_template").write_text("id,name,amount\n")
    (directory / "customers_template.csv").write_text("customer_id,email\n")
    return directory


@pytest.fixture
def templates(template_dir):
    return load_templates(template_dir)


@pytest.fixture
def source_dir(tmp_path):
    directory = tmp_path / "incoming"
    directory.mkdir()
    return directory


@pytest.fixture
def destination():
    return RemoteDestination(user="loader", host="warehouse.internal", base_dir="/data/tables")


@pytest.fixture
def fake_transfer():
    return FakeTransfer()


@pytest.fixture
def pipeline(templates, destination, fake_transfer):
    return UploadPipeline(templates, destination, fake_transfer)


@pytest.fixture
def stand_in_rsync(tmp_path):
    """
    Build an executable that records its arguments and behaves like rsync.

    ``stdout``/``stderr`` are printf formats, so octal escapes such as
    ``\\351`` emit raw bytes.
    """
    def build(stdout: str = "", stderr: str = "", exit_code: int = 0):
        argv_file = tmp_path / "rsync-argv.txt"
        script = tmp_path / "fake-rsync"
        script.write_text(
            "#!/bin/sh\n"
            f"for arg in \"$@\"; do printf '%s\\n' \"$arg\"; done > '{argv_file}'\n"
            f"printf '{stdout}'\n"
            f"printf '{stderr}' >&2\n"
            f"exit {exit_code}\n"
        )
        script.chmod(0o755)
        return script, argv_file

    return build
