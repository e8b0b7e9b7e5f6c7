"""
Path operations for the pathkit operator.

Wraps the library functions with policy checks, dry-run previews and
audit logging.
"""

import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..counters import PathCounters
from ..filters import PathFilter, TrueFileFilter
from ..logger import AuditLogger, ActionType, ActionStatus
from ..options import DeleteOption
from ..paths import (
    accumulate,
    copy_file_to_directory,
    count_directory,
    delete,
    delete_file,
    is_empty_directory,
)
from ..attributes import set_read_only
from ..errors import MissingPathError, NotEmptyError
from ..policy import ActionRequest, PathPolicy


PathLike = Union[str, os.PathLike]


class PathOperator:
    """Policy-gated, audited access to pathkit operations."""

    def __init__(self, policy: PathPolicy, logger: AuditLogger):
        """
        Args:
            policy: Policy deciding which actions may run
            logger: Audit logger for outcomes
        """
        self.policy = policy
        self.logger = logger

    def _options(self, options: Optional[Iterable[DeleteOption]]) -> List[DeleteOption]:
        if options is None:
            return sorted(self.policy.delete_options(), key=lambda o: o.name)
        return list(options)

    def _denied(self, action_type: ActionType, action: ActionRequest, message: Optional[str]) -> None:
        self.logger.log_action(
            action_type=action_type,
            description=f"Permission denied: {action.description}",
            target=action.target,
            status=ActionStatus.DENIED,
            result=message
        )

    def _failed(self, action_type: ActionType, action: ActionRequest, error: Exception) -> None:
        self.logger.log_action(
            action_type=action_type,
            description=f"Failed: {action.description}",
            target=action.target,
            status=ActionStatus.FAILED,
            result=f"Error: {error}"
        )

    def delete_file(
        self,
        path: PathLike,
        options: Optional[Iterable[DeleteOption]] = None,
        dry_run: bool = False
    ) -> Optional[PathCounters]:
        """
        Delete a single file or link. Directories are refused.

        Args:
            path: Path to delete
            options: Delete options, the policy defaults when None
            dry_run: If True, only report what would be deleted

        Returns:
            PathCounters of what was (or would be) deleted, None if denied

        Raises:
            MissingPathError: If the path does not exist or is an empty directory
            NotEmptyError: If the path is a non-empty directory
            PermissionDeniedError: If the system refuses the deletion
        """
        opts = self._options(options)
        action = ActionRequest(
            action_type="delete_file",
            description=f"Delete file: {path}",
            target=os.fspath(path),
            parameters={"options": [o.name for o in opts]}
        )

        result = self.policy.check(action, dry_run=dry_run)
        if not result.success:
            self._denied(ActionType.DELETE, action, result.message)
            return None

        if dry_run:
            counters = self._preview_file(path)
            self.logger.log_action(
                action_type=ActionType.DELETE,
                description=f"DRY-RUN: Would delete {path}",
                target=action.target,
                status=ActionStatus.DRY_RUN,
                metadata=counters.to_dict()
            )
            return counters

        try:
            counters = delete_file(path, *opts)
        except OSError as e:
            self._failed(ActionType.DELETE, action, e)
            raise

        self.logger.log_action(
            action_type=ActionType.DELETE,
            description=f"Deleted {path}",
            target=action.target,
            status=ActionStatus.EXECUTED,
            result=str(counters),
            metadata=counters.to_dict()
        )
        return counters

    def _preview_file(self, path: PathLike) -> PathCounters:
        p = Path(path)
        if not os.path.lexists(p):
            raise MissingPathError("No such file or directory", p)
        if p.is_dir() and not p.is_symlink():
            if is_empty_directory(p):
                raise MissingPathError("Not a file", p)
            raise NotEmptyError("Directory not empty", p)
        size = p.lstat().st_size if p.is_file() and not p.is_symlink() else 0
        return PathCounters(file_count=1, byte_count=size)

    def delete(
        self,
        path: PathLike,
        options: Optional[Iterable[DeleteOption]] = None,
        dry_run: bool = False
    ) -> Optional[PathCounters]:
        """
        Delete a file or a whole directory tree.

        Deleting a tree is a "delete_tree" action and may need approval.

        Returns:
            PathCounters of what was (or would be) deleted, None if denied
        """
        p = Path(path)
        if not os.path.lexists(p):
            raise MissingPathError("No such file or directory", p)
        if not (p.is_dir() and not p.is_symlink()):
            return self.delete_file(path, options=options, dry_run=dry_run)

        opts = self._options(options)
        action = ActionRequest(
            action_type="delete_tree",
            description=f"Delete directory tree: {path}",
            target=os.fspath(path),
            parameters={"options": [o.name for o in opts]}
        )

        result = self.policy.check(action, dry_run=dry_run)
        if not result.success:
            self._denied(ActionType.DELETE, action, result.message)
            return None

        if dry_run:
            counters = count_directory(path)
            self.logger.log_action(
                action_type=ActionType.DELETE,
                description=f"DRY-RUN: Would delete tree {path} ({counters})",
                target=action.target,
                status=ActionStatus.DRY_RUN,
                metadata=counters.to_dict()
            )
            return counters

        try:
            counters = delete(path, *opts)
        except OSError as e:
            self._failed(ActionType.DELETE, action, e)
            raise

        self.logger.log_action(
            action_type=ActionType.DELETE,
            description=f"Deleted tree {path}",
            target=action.target,
            status=ActionStatus.EXECUTED,
            result=str(counters),
            metadata=counters.to_dict()
        )
        return counters

    def set_read_only(self, path: PathLike, read_only: bool, dry_run: bool = False) -> bool:
        """
        Make a path read-only or writable.

        Returns:
            True if applied (or previewed), False if denied
        """
        state = "read-only" if read_only else "writable"
        action = ActionRequest(
            action_type="set_read_only",
            description=f"Make {path} {state}",
            target=os.fspath(path),
            parameters={"read_only": read_only}
        )

        result = self.policy.check(action, dry_run=dry_run)
        if not result.success:
            self._denied(ActionType.ATTRIBUTE, action, result.message)
            return False

        if dry_run:
            self.logger.log_action(
                action_type=ActionType.ATTRIBUTE,
                description=f"DRY-RUN: Would make {path} {state}",
                target=action.target,
                status=ActionStatus.DRY_RUN
            )
            return True

        try:
            set_read_only(path, read_only)
        except OSError as e:
            self._failed(ActionType.ATTRIBUTE, action, e)
            raise

        self.logger.log_action(
            action_type=ActionType.ATTRIBUTE,
            description=f"Made {path} {state}",
            target=action.target,
            status=ActionStatus.EXECUTED
        )
        return True

    def count(self, path: PathLike, file_filter: Optional[PathFilter] = None) -> PathCounters:
        """Count files, directories and bytes below a path."""
        counters = count_directory(path, file_filter=file_filter)
        self.logger.log_action(
            action_type=ActionType.READ,
            description=f"Counted {path}",
            target=os.fspath(path),
            status=ActionStatus.EXECUTED,
            metadata=counters.to_dict()
        )
        return counters

    def find(self, path: PathLike, file_filter: Optional[PathFilter] = None) -> List[Path]:
        """
        List the files below a path accepted by a filter.

        Returns:
            Sorted list of matching file paths
        """
        visitor = accumulate(path, file_filter=file_filter or TrueFileFilter())
        self.logger.log_action(
            action_type=ActionType.READ,
            description=f"Searched {path}",
            target=os.fspath(path),
            status=ActionStatus.EXECUTED,
            result=f"{len(visitor.files)} matches"
        )
        return visitor.files

    def copy_file_to_directory(self, source: PathLike, directory: PathLike, dry_run: bool = False) -> Optional[Path]:
        """
        Copy a file into a directory.

        Returns:
            Path of the copy (or where it would go), None if denied
        """
        target = Path(directory) / Path(source).name
        action = ActionRequest(
            action_type="copy_file",
            description=f"Copy {source} to {directory}",
            target=os.fspath(target),
            parameters={"source": os.fspath(source)}
        )

        result = self.policy.check(action, dry_run=dry_run)
        if not result.success:
            self._denied(ActionType.COPY, action, result.message)
            return None

        if dry_run:
            self.logger.log_action(
                action_type=ActionType.COPY,
                description=f"DRY-RUN: Would copy {source} to {directory}",
                target=action.target,
                status=ActionStatus.DRY_RUN
            )
            return target

        try:
            copied = copy_file_to_directory(source, directory)
        except OSError as e:
            self._failed(ActionType.COPY, action, e)
            raise

        self.logger.log_action(
            action_type=ActionType.COPY,
            description=f"Copied {source} to {directory}",
            target=action.target,
            status=ActionStatus.EXECUTED,
            result=f"File copied ({copied.stat().st_size} bytes)"
        )
        return copied
