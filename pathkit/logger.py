"""
Audit log for pathkit.

Every delete, attribute change and copy done through the operator is
appended to a JSONL file together with its outcome and counters.
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Dict, Any
from enum import Enum


class ActionType(Enum):
    """Kinds of operations that are logged."""
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    ATTRIBUTE = "attribute"
    COPY = "copy"
    POLICY = "policy"


class ActionStatus(Enum):
    """Outcome of an operation."""
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    EXECUTED = "executed"
    FAILED = "failed"
    DRY_RUN = "dry_run"


@dataclass
class AuditEntry:
    """A single audit log line."""
    timestamp: str
    action_type: str
    action_description: str
    target: Optional[str]
    status: str
    result: Optional[str]
    metadata: Dict[str, Any]

    @classmethod
    def create(
        cls,
        action_type: ActionType,
        action_description: str,
        target: Optional[str] = None,
        status: ActionStatus = ActionStatus.PENDING,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "AuditEntry":
        """Build an entry stamped with the current time."""
        return cls(
            timestamp=datetime.now().isoformat(),
            action_type=action_type.value,
            action_description=action_description,
            target=target,
            status=status.value,
            result=result,
            metadata=metadata or {}
        )

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "AuditEntry":
        return cls(**json.loads(json_str))


class AuditLogger:
    """
    Append-only JSONL audit logger.

    Lines are never rewritten; readers skip lines that fail to parse.
    """

    def __init__(self, log_path: str = ".pathkit/audit_log.jsonl"):
        """
        Args:
            log_path: Path to the JSONL log file, created on first use
        """
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.log_path.exists():
            self.log_path.touch()

    def log(self, entry: AuditEntry) -> None:
        """Append an entry to the log."""
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(entry.to_json() + "\n")

    def log_action(
        self,
        action_type: ActionType,
        description: str,
        target: Optional[str] = None,
        status: ActionStatus = ActionStatus.PENDING,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> AuditEntry:
        """
        Create and append an entry in one call.

        Returns the created AuditEntry.
        """
        entry = AuditEntry.create(
            action_type=action_type,
            action_description=description,
            target=target,
            status=status,
            result=result,
            metadata=metadata
        )
        self.log(entry)
        return entry

    def _read_entries(self) -> List[AuditEntry]:
        entries = []
        if not self.log_path.exists():
            return entries
        with open(self.log_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(AuditEntry.from_json(line))
                except (json.JSONDecodeError, TypeError):
                    continue
        return entries

    def get_recent(self, limit: int = 100) -> List[AuditEntry]:
        """
        Get the most recent entries.

        Args:
            limit: Maximum number of entries to return

        Returns:
            List of AuditEntry objects, most recent first
        """
        if limit <= 0:
            return []
        return list(reversed(self._read_entries()[-limit:]))

    def get_by_action_type(self, action_type: ActionType, limit: int = 100) -> List[AuditEntry]:
        """Get entries of one action type, oldest first."""
        matches = [e for e in self._read_entries() if e.action_type == action_type.value]
        return matches[:limit]

    def get_failed_actions(self, limit: int = 50) -> List[AuditEntry]:
        """Get entries that were denied or failed, oldest first."""
        bad = (ActionStatus.DENIED.value, ActionStatus.FAILED.value)
        return [e for e in self._read_entries() if e.status in bad][:limit]

    def export(self, format: str = "json") -> str:
        """
        Export the whole log.

        Args:
            format: "json" or "csv"

        Returns:
            The exported data as a string
        """
        entries = self._read_entries()

        if format == "json":
            return json.dumps([asdict(e) for e in entries], indent=2)
        elif format == "csv":
            lines = ["timestamp,action_type,action_description,target,status,result"]
            for e in entries:
                lines.append(
                    f'"{e.timestamp}","{e.action_type}","{e.action_description}",'
                    f'"{e.target or ""}","{e.status}","{e.result or ""}"'
                )
            return "\n".join(lines)
        else:
            raise ValueError(f"Unsupported export format: {format}")
