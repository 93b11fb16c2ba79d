"""
CSV Courier - Main entry point

Watches a source directory for CSV files, matches each file's header line
against known table templates and uploads matched files to
``<DEST_DIR>/<table>`` on the destination host:
- Successful uploads delete the local file
- Every outcome is appended to upload.log next to the file
"""

import signal
import sys
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from courier.utils.config import Settings, get_settings
from domains.table_upload.pipeline import UploadPipeline
from domains.table_upload.processors.transfer import RsyncTransfer
from domains.table_upload.templates import TemplateLoadError, load_templates
from domains.table_upload.watchers.filesystem import ChangeMonitor

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"


def configure_logging(level: str = "INFO"):
    """Send process diagnostics to stdout."""
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level.upper())


def build_pipeline(settings: Settings) -> UploadPipeline:
    """
    Build the upload pipeline from settings.

    Raises:
        TemplateLoadError: Templates could not be loaded
    """
    templates = load_templates(settings.template_dir, skip_invalid=settings.skip_bad_templates)
    transfer = RsyncTransfer(binary=settings.rsync_binary, timeout=settings.transfer_timeout)
    return UploadPipeline(templates, settings.destination(), transfer)


def main(settings: Optional[Settings] = None) -> int:
    """Main entry point."""
    configure_logging()

    try:
        settings = settings or get_settings()
    except ValidationError as e:
        logger.error(f"Invalid or missing configuration: {e}")
        return 1

    configure_logging(settings.log_level)
    logger.info("CSV Courier - table upload watcher")

    try:
        pipeline = build_pipeline(settings)
    except TemplateLoadError as e:
        logger.error(f"Failed to load table templates: {e}")
        return 1

    monitor = ChangeMonitor(
        settings.source_dir,
        poll_interval=settings.poll_interval,
        use_polling=settings.use_polling,
    )

    def _signal_handler(signum, frame):  # noqa: D401
        logger.info(f"Received signal {signum}, shutting down.")
        monitor.stop()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    monitor.run(pipeline.process)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
