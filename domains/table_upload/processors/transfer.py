"""
Remote transfer capability for Table Upload domain.

Copies a local file into a remote directory with rsync over ssh. The remote
directory is created on demand by the remote rsync invocation itself.
"""

import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol

from loguru import logger

from courier.models.schemas import RemoteTarget, TransferOutcome
from courier.utils.helpers import one_line


class Transfer(Protocol):
    """Copies one local file into a remote directory."""

    def __call__(self, local_path: Path, target: RemoteTarget) -> TransferOutcome:  # pragma: no cover - interface
        ...


class RsyncTransfer:
    """rsync-backed transfer with optional timeout."""

    def __init__(self, binary: str = "rsync", timeout: Optional[float] = None):
        """
        Initialize rsync transfer.

        Args:
            binary: rsync executable name or path
            timeout: Seconds before a running transfer is killed and failed
        """
        self.binary = binary
        self.timeout = timeout

    def build_command(self, local_path: Path, target: RemoteTarget) -> List[str]:
        """
        Build the rsync argument list.

        Arguments are passed without a local shell. File paths travel over
        the rsync protocol (--protect-args); only the --rsync-path command is
        evaluated by the remote shell, so the directory is quoted there.
        """
        remote_dir = shlex.quote(target.directory)
        return [
            self.binary,
            "-aLvz",
            "--partial-dir=tmp",
            "--protect-args",
            f"--rsync-path=mkdir -p {remote_dir} && rsync",
            str(local_path),
            f"{target.user}@{target.host}:{target.directory}/",
        ]

    def __call__(self, local_path: Path, target: RemoteTarget) -> TransferOutcome:
        command = self.build_command(local_path, target)
        logger.info(f"Running rsync command: {shlex.join(command)}")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            reason = f"Transfer timed out after {self.timeout:g} seconds"
            logger.error(reason)
            return TransferOutcome.failure(reason)
        except OSError as e:
            logger.error(f"Failed to execute rsync command: {e}")
            return TransferOutcome.failure(str(e))

        if result.returncode == 0:
            logger.info(f"rsync succeeded: {one_line(result.stdout)}")
            return TransferOutcome.success()

        reason = one_line(result.stderr) or f"rsync exited with status {result.returncode}"
        logger.error(f"rsync failed: {reason}")
        return TransferOutcome.failure(reason)
