"""
Pydantic models for CSV Courier.

Shared value types passed between the watcher, router and dispatcher.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from courier.utils.helpers import get_file_extension


# =====================================================
# Watcher Models
# =====================================================

class CandidateFile(BaseModel):
    """File reported ready by the change monitor."""
    model_config = ConfigDict(frozen=True)

    path: Path
    extension: str = ""

    @classmethod
    def from_path(cls, path: Path) -> "CandidateFile":
        return cls(path=path, extension=get_file_extension(path))

    @property
    def is_csv(self) -> bool:
        return self.extension == "csv"


# =====================================================
# Routing Models
# =====================================================

class RoutingResult(BaseModel):
    """Outcome of header matching: a table name or no match."""
    model_config = ConfigDict(frozen=True)

    table: Optional[str] = None

    @classmethod
    def matched(cls, table: str) -> "RoutingResult":
        return cls(table=table)

    @classmethod
    def unmatched(cls) -> "RoutingResult":
        return cls()

    @property
    def is_matched(self) -> bool:
        return self.table is not None


# =====================================================
# Transfer Models
# =====================================================

class RemoteDestination(BaseModel):
    """Remote user, host and base directory receiving uploads."""
    model_config = ConfigDict(frozen=True)

    user: str
    host: str
    base_dir: str

    def for_table(self, table: str) -> "RemoteTarget":
        """Target directory ``<base_dir>/<table>`` for a matched table."""
        directory = f"{self.base_dir.rstrip('/')}/{table}" if self.base_dir else table
        return RemoteTarget(user=self.user, host=self.host, directory=directory)


class RemoteTarget(BaseModel):
    """Concrete remote directory a single file is copied into."""
    model_config = ConfigDict(frozen=True)

    user: str
    host: str
    directory: str


class TransferOutcome(BaseModel):
    """Success, or failure with a human-readable reason."""
    model_config = ConfigDict(frozen=True)

    ok: bool
    reason: Optional[str] = None

    @classmethod
    def success(cls) -> "TransferOutcome":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: str) -> "TransferOutcome":
        return cls(ok=False, reason=reason)
