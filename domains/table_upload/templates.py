"""
Template registry for Table Upload domain.

Builds the header-line -> table-name mapping from a directory of
``<table>_template`` files. Each file holds the exact header line of its table.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from loguru import logger

from courier.utils.helpers import normalise_header


TEMPLATE_SUFFIX = "_template"

TemplateMap = Mapping[str, str]


class TemplateLoadError(Exception):
    """Template directory or template file could not be read."""


def table_name_for(template_path: Path) -> Optional[str]:
    """
    Derive the table name from a template file name.

    ``orders_template`` and ``orders_template.csv`` both map to ``orders``.

    Returns:
        Table name, or None if the name does not follow the template convention
    """
    stem = template_path.stem
    if not stem.endswith(TEMPLATE_SUFFIX) or stem == TEMPLATE_SUFFIX:
        return None
    return stem[: -len(TEMPLATE_SUFFIX)]


def load_templates(template_dir: Path, skip_invalid: bool = False) -> TemplateMap:
    """
    Load all table templates from ``template_dir``.

    Args:
        template_dir: Directory containing template files
        skip_invalid: Skip unreadable template files instead of failing

    Returns:
        Read-only mapping of normalized header line to table name

    Raises:
        TemplateLoadError: Directory unreadable, or a template file unreadable
            while ``skip_invalid`` is False
    """
    try:
        entries = sorted(p for p in Path(template_dir).iterdir() if p.is_file())
    except OSError as e:
        raise TemplateLoadError(f"Cannot read template directory {template_dir}: {e}") from e

    headers: Dict[str, str] = {}

    for template_path in entries:
        table_name = table_name_for(template_path)
        if table_name is None:
            logger.warning(f"Skipping non-template file: {template_path.name}")
            continue

        try:
            content = template_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            if not skip_invalid:
                raise TemplateLoadError(f"Cannot read template {template_path}: {e}") from e
            logger.warning(f"Skipping unreadable template {template_path.name}: {e}")
            continue

        header = normalise_header(content.strip())

        previous = headers.get(header)
        if previous is not None and previous != table_name:
            logger.warning(
                f"Header of table '{table_name}' duplicates table '{previous}', "
                f"'{table_name}' wins"
            )

        headers[header] = table_name
        logger.debug(f"Loaded template for table '{table_name}': {header}")

    if not headers:
        logger.warning(f"No table templates found in {template_dir}")
    else:
        logger.info(f"Loaded {len(headers)} table templates from {template_dir}")

    return MappingProxyType(headers)
