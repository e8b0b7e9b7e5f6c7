"""
Typed failures for pathkit operations.

Every error derives from the builtin OSError family so callers that already
catch FileNotFoundError or PermissionError keep working.
"""

import errno
import os
from typing import Optional, Union


class PathKitError(OSError):
    """Base class for pathkit file-system failures."""

    default_errno: Optional[int] = None

    def __init__(self, message: str, path: Optional[Union[str, os.PathLike]] = None):
        if path is not None and self.default_errno is not None:
            super().__init__(self.default_errno, message, os.fspath(path))
        else:
            super().__init__(message)
        self.message = message
        self.path = os.fspath(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message}: {self.path}"
        return self.message


class MissingPathError(PathKitError, FileNotFoundError):
    """The target does not exist where existence was required."""
    default_errno = errno.ENOENT


class NotEmptyError(PathKitError):
    """A non-recursive removal hit a directory that still has entries."""
    default_errno = errno.ENOTEMPTY


class PermissionDeniedError(PathKitError, PermissionError):
    """The system refused the operation (read-only node, missing rights)."""
    default_errno = errno.EACCES


class UnsupportedAttributeError(PathKitError):
    """Neither the DOS nor the POSIX attribute view is available."""
    default_errno = errno.ENOTSUP


def classify_error(
    exc: OSError,
    path: Union[str, os.PathLike],
    directory: bool = False
) -> OSError:
    """
    Map a raw OSError from a file-system primitive to a typed pathkit error.

    Args:
        exc: The exception raised by the primitive
        path: Path the primitive was applied to
        directory: True if the primitive was a directory removal, where
            EEXIST is also reported for non-empty directories

    Returns:
        A PathKitError subclass, or ``exc`` itself when no mapping applies
    """
    if isinstance(exc, PathKitError):
        return exc

    code = exc.errno
    if isinstance(exc, FileNotFoundError) or code == errno.ENOENT:
        return MissingPathError("No such file or directory", path)
    if code == errno.ENOTEMPTY or (directory and code == errno.EEXIST):
        return NotEmptyError("Directory not empty", path)
    # Windows reports a non-empty rmdir as ERROR_DIR_NOT_EMPTY (145)
    if directory and getattr(exc, "winerror", None) == 145:
        return NotEmptyError("Directory not empty", path)
    if isinstance(exc, PermissionError) or code in (errno.EACCES, errno.EPERM):
        return PermissionDeniedError("Permission denied", path)
    return exc


def raise_classified(exc: OSError, path: Union[str, os.PathLike], directory: bool = False) -> None:
    """Raise the typed error for ``exc``, chained to it, or ``exc`` unchanged."""
    typed = classify_error(exc, path, directory)
    if typed is exc:
        raise exc
    raise typed from exc
