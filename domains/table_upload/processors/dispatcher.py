"""
Dispatcher for Table Upload domain.

Copies a matched CSV file into ``<remote_base_dir>/<table>`` and removes the
local copy once the transfer has succeeded. Failed transfers leave the file
in place for manual intervention. There is no retry.
"""

from pathlib import Path

from loguru import logger

from courier.models.schemas import RemoteDestination, TransferOutcome
from courier.utils.helpers import parent_dir
from domains.table_upload.processors import audit_log
from domains.table_upload.processors.transfer import Transfer


def delete_source_file(path: Path) -> bool:
    """
    Delete the local source file after a successful upload.

    Returns:
        True if deleted, False otherwise
    """
    logger.info(f"Attempting to delete source file: {path}")
    try:
        path.unlink()
    except OSError as e:
        logger.error(f"Error deleting source file {path}: {e}")
        return False

    logger.info(f"Deleted source file: {path}")
    return True


def dispatch(
    path: Path,
    table: str,
    destination: RemoteDestination,
    transfer: Transfer,
) -> TransferOutcome:
    """
    Upload ``path`` to the remote directory of ``table``.

    The success record is written before the local file is deleted; a failed
    delete is only logged.

    Args:
        path: Local CSV file
        table: Matched table name
        destination: Remote user, host and base directory
        transfer: Transfer capability performing the copy

    Returns:
        Outcome reported by the transfer
    """
    path = Path(path).absolute()
    target = destination.for_table(table)

    logger.info(f"Uploading {path.name} to {target.host}:{target.directory}")
    outcome = transfer(path, target)

    log_dir = parent_dir(path)

    if outcome.ok:
        logger.success(f"Upload succeeded: {path.name}")
        if log_dir is None:
            logger.error(f"Failed to get parent directory of {path}")
        else:
            audit_log.record(log_dir, audit_log.success_message(path.name))
        delete_source_file(path)
    else:
        logger.error(f"Upload failed: {path.name}: {outcome.reason}")
        if log_dir is None:
            logger.error(f"Failed to get parent directory of {path}")
        else:
            audit_log.record(log_dir, audit_log.failure_message(path.name, outcome.reason or ""))

    return outcome
