"""
Service-level test for the table upload flow.

Runs a real polling observer against a temporary directory and feeds its
candidates through the upload pipeline with a recording transfer. Files are
written the way producers write them; the assertions look only at observable
outcomes: transfers requested, files left on disk and upload.log contents.
"""

import threading
import time

import pytest

from conftest import FakeTransfer, read_audit
from courier.models.schemas import TransferOutcome
from domains.table_upload.pipeline import UploadPipeline
from domains.table_upload.watchers.filesystem import ChangeMonitor

DEADLINE_SECONDS = 10


def wait_for(condition, timeout=DEADLINE_SECONDS):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.05)
    return False


@pytest.fixture
def running_monitor(source_dir):
    """Start a polling monitor in the background and stop it afterwards."""
    monitors = []

    def start(pipeline):
        monitor = ChangeMonitor(source_dir, poll_interval=0.1, use_polling=True)
        worker = threading.Thread(target=monitor.run, args=(pipeline.process,), daemon=True)
        worker.start()
        assert wait_for(monitor.is_watching), "observer did not start"
        monitors.append((monitor, worker))
        return monitor

    yield start

    for monitor, worker in monitors:
        monitor.stop()
        worker.join(timeout=DEADLINE_SECONDS)


def test_new_csv_files_are_routed_uploaded_and_audited(
    source_dir, templates, destination, fake_transfer, running_monitor
):
    running_monitor(UploadPipeline(templates, destination, fake_transfer))

    matched = source_dir / "orders_001.csv"
    matched.write_text("id,name,amount,\n1,widget,9.99\n")
    unknown = source_dir / "unknown.csv"
    unknown.write_text("foo,bar\n1,2\n")
    (source_dir / "orders.json").write_text('{"id": 1}')
    (source_dir / "notes.txt").write_text("id,name,amount\n")

    assert wait_for(lambda: not matched.exists())
    assert wait_for(lambda: len(read_audit(source_dir)) >= 2)
    time.sleep(0.5)

    assert [call[1].directory for call in fake_transfer.calls] == ["/data/tables/orders"]
    assert unknown.exists()
    assert (source_dir / "orders.json").exists()
    assert (source_dir / "notes.txt").exists()

    messages = sorted(line.split(" - ", 1)[1] for line in read_audit(source_dir))
    assert messages == [
        "Upload failed! File: unknown.csv Reason: No matching table headers found.",
        "Upload succeeded! File: orders_001.csv",
    ]


def test_failed_transfer_keeps_file_in_subdirectory(
    source_dir, templates, destination, running_monitor
):
    transfer = FakeTransfer(TransferOutcome.failure("ssh: connect to host warehouse.internal port 22: Connection refused"))
    running_monitor(UploadPipeline(templates, destination, transfer))

    nested = source_dir / "branch-7"
    nested.mkdir()
    csv_path = nested / "customers.csv"
    csv_path.write_text("customer_id,email\n42,a@example.com\n")

    assert wait_for(lambda: len(read_audit(nested)) >= 1)

    assert csv_path.exists()
    assert transfer.calls[0][1].directory == "/data/tables/customers"
    assert read_audit(nested)[0].endswith(
        "Upload failed! File: customers.csv Reason: "
        "ssh: connect to host warehouse.internal port 22: Connection refused"
    )
