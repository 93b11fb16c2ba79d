"""
Upload pipeline for Table Upload domain.

Runs one candidate file through route -> dispatch -> audit. Every per-file
error ends here; nothing propagates to the watcher loop.
"""

from pathlib import Path
from typing import Optional, Union

from loguru import logger

from courier.models.schemas import CandidateFile, RemoteDestination, TransferOutcome
from courier.utils.helpers import parent_dir
from domains.table_upload.processors import audit_log
from domains.table_upload.processors.dispatcher import dispatch
from domains.table_upload.processors.router import RouteError, route
from domains.table_upload.processors.transfer import Transfer
from domains.table_upload.templates import TemplateMap


class UploadPipeline:
    """Routes and uploads candidate CSV files."""

    def __init__(self, templates: TemplateMap, destination: RemoteDestination, transfer: Transfer):
        """
        Initialize upload pipeline.

        Args:
            templates: Read-only header line to table name mapping
            destination: Remote user, host and base directory
            transfer: Transfer capability used by the dispatcher
        """
        self.templates = templates
        self.destination = destination
        self.transfer = transfer

    def process(self, candidate: Union[CandidateFile, Path]) -> Optional[TransferOutcome]:
        """
        Process one candidate to a terminal state.

        Returns:
            Transfer outcome if the file was matched and dispatched, else None
        """
        if not isinstance(candidate, CandidateFile):
            candidate = CandidateFile.from_path(Path(candidate))

        if not candidate.is_csv:
            logger.debug(f"Ignoring non-CSV file: {candidate.path}")
            return None

        try:
            return self._process(candidate.path)
        except Exception:
            logger.exception(f"Unexpected error processing {candidate.path}")
            return None

    def _process(self, path: Path) -> Optional[TransferOutcome]:
        try:
            result = route(path, self.templates)
        except RouteError as e:
            logger.error(f"Error matching column headers of {path}: {e}")
            log_dir = parent_dir(path)
            if log_dir is None:
                logger.error(f"Failed to get parent directory of {path}")
            else:
                audit_log.record(log_dir, audit_log.failure_message(path.name, str(e)))
            return None

        if not result.is_matched:
            return None

        return dispatch(path, result.table, self.destination, self.transfer)
