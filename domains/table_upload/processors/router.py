"""
Table router for Table Upload domain.

Resolves a CSV file to a table by exact match of its header line against
the loaded templates. No fuzzy or partial matching is done.
"""

from pathlib import Path

from loguru import logger

from courier.models.schemas import RoutingResult
from courier.utils.helpers import normalise_header, parent_dir
from domains.table_upload.processors import audit_log
from domains.table_upload.templates import TemplateMap

NO_MATCH_REASON = "No matching table headers found."


class RouteError(Exception):
    """Candidate file could not be opened or its header could not be read."""


def read_header(path: Path) -> str:
    """
    Read and normalize the first line of ``path``.

    Raises:
        RouteError: File cannot be opened, read or decoded
    """
    try:
        with open(path, "r", encoding="utf-8", newline="") as csv_file:
            first_line = csv_file.readline()
    except (OSError, UnicodeDecodeError) as e:
        raise RouteError(str(e)) from e

    return normalise_header(first_line)


def route(path: Path, templates: TemplateMap) -> RoutingResult:
    """
    Match the header line of ``path`` to a table.

    A path that no longer exists is unmatched without an audit record.
    A header with no template is unmatched and audited next to the file.

    Args:
        path: Candidate CSV file
        templates: Header line to table name mapping

    Returns:
        Matched table name, or unmatched

    Raises:
        RouteError: File exists but its header cannot be read
    """
    path = Path(path)

    if not path.exists():
        logger.debug(f"File no longer exists, nothing to route: {path}")
        return RoutingResult.unmatched()

    header = read_header(path)
    logger.info(f"CSV headers: {header!r}")

    table = templates.get(header)
    if table is not None:
        logger.info(f"Matching table headers found, table name: {table}")
        return RoutingResult.matched(table)

    logger.info(f"No matching table headers found, ignoring {path.name}")

    log_dir = parent_dir(path)
    if log_dir is None:
        logger.error(f"Failed to get parent directory of {path}")
    else:
        audit_log.record(log_dir, audit_log.failure_message(path.name, NO_MATCH_REASON))

    return RoutingResult.unmatched()
