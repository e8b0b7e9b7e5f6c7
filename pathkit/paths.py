"""
Path utilities: delete, count, copy and small helpers.

All functions take ``str`` or ``os.PathLike`` paths and raise the typed
errors from pathkit.errors.
"""

import os
import shutil
import stat
from pathlib import Path
from typing import Iterable, Optional, Union

from .attributes import is_read_only, set_read_only
from .counters import Counters, PathCounters
from .errors import MissingPathError, NotEmptyError, raise_classified
from .filters import PathFilter
from .options import DeleteOption, overrides_read_only
from .visitors import CountingVisitor, DeletingVisitor, walk


PathLike = Union[str, os.PathLike]


def _lstat(path: PathLike) -> Optional[os.stat_result]:
    try:
        return os.lstat(path)
    except FileNotFoundError:
        return None
    except OSError as e:
        raise_classified(e, path)


def delete_file(path: PathLike, *options: DeleteOption) -> PathCounters:
    """
    Delete a single file or symbolic link.

    Directories are not files: an empty one raises MissingPathError and
    one with entries raises NotEmptyError. Use delete_directory() or
    delete() for those. Symbolic links are removed as links; their target
    is not looked at.

    Args:
        path: Path to delete
        *options: Delete options, e.g. DeleteOption.OVERRIDE_READ_ONLY

    Returns:
        PathCounters of what was removed: one file and its size for a
        regular file, one file and zero bytes for a link

    Raises:
        MissingPathError: If the path does not exist or is an empty directory
        NotEmptyError: If the path is a directory that has entries
        PermissionDeniedError: If the system refuses the deletion
    """
    if path is None:
        raise MissingPathError("No path given")

    st = _lstat(path)
    if st is None:
        raise MissingPathError("No such file or directory", path)

    if stat.S_ISDIR(st.st_mode):
        if is_empty_directory(path):
            raise MissingPathError("Not a file", path)
        raise NotEmptyError("Directory not empty", path)

    if overrides_read_only(options) and not stat.S_ISLNK(st.st_mode):
        if is_read_only(path, follow_symlinks=False):
            set_read_only(path, False, follow_symlinks=False)

    counters = Counters()
    try:
        os.unlink(path)
    except OSError as e:
        raise_classified(e, path)

    counters.add_file(st.st_size if stat.S_ISREG(st.st_mode) else 0)
    return counters.snapshot()


def delete_directory(
    path: PathLike,
    *options: DeleteOption,
    skip: Iterable[str] = ()
) -> PathCounters:
    """
    Delete a directory and everything below it.

    Args:
        path: Directory to delete
        *options: Delete options, e.g. DeleteOption.OVERRIDE_READ_ONLY
        skip: Entry names to keep; their parent directories are kept too

    Returns:
        PathCounters of what was removed, the directory itself included

    Raises:
        MissingPathError: If the path does not exist
        NotADirectoryError: If the path is not a directory
        PermissionDeniedError: If the system refuses a deletion
    """
    st = _lstat(path)
    if st is None:
        raise MissingPathError("No such file or directory", path)
    if not stat.S_ISDIR(st.st_mode):
        raise NotADirectoryError(f"Not a directory: {path}")
    return walk(path, DeletingVisitor(*options, skip=skip)).path_counters


def delete(path: PathLike, *options: DeleteOption) -> PathCounters:
    """
    Delete a file, link or whole directory tree.

    Directories are removed recursively; links to directories are
    removed as links.
    """
    st = _lstat(path)
    if st is None:
        raise MissingPathError("No such file or directory", path)
    if stat.S_ISDIR(st.st_mode):
        return delete_directory(path, *options)
    return delete_file(path, *options)


def accumulate(
    path: PathLike,
    file_filter: Optional[PathFilter] = None,
    directory_filter: Optional[PathFilter] = None
) -> CountingVisitor:
    """
    Walk a tree and collect counts plus the visited files and directories.

    Returns:
        The CountingVisitor after the walk, with ``files`` and
        ``directories`` in tree order: sorted component by component, so
        "a/z.txt" comes before "a-b.txt"
    """
    visitor = walk(path, CountingVisitor(file_filter, directory_filter))
    visitor.files.sort(key=lambda p: p.parts)
    visitor.directories.sort(key=lambda p: p.parts)
    return visitor


def count_directory(
    path: PathLike,
    file_filter: Optional[PathFilter] = None,
    directory_filter: Optional[PathFilter] = None
) -> PathCounters:
    """Count files, directories and bytes under ``path`` without changing it."""
    return accumulate(path, file_filter, directory_filter).path_counters


def is_empty_directory(path: PathLike) -> bool:
    """Check whether ``path`` is a directory with no entries."""
    try:
        with os.scandir(path) as it:
            return next(it, None) is None
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as e:
        raise_classified(e, path)


def is_empty(path: PathLike) -> bool:
    """
    Check whether ``path`` is an empty directory or a zero-length file.

    Raises:
        MissingPathError: If the path does not exist
    """
    st = _lstat(path)
    if st is None:
        raise MissingPathError("No such file or directory", path)
    if stat.S_ISDIR(st.st_mode):
        return is_empty_directory(path)
    return st.st_size == 0


def copy_file_to_directory(source: PathLike, directory: PathLike) -> Path:
    """
    Copy a file into a directory, keeping its name and metadata.

    Returns:
        Path of the copy

    Raises:
        MissingPathError: If the source does not exist
        NotADirectoryError: If the destination is not a directory
    """
    source = Path(source)
    directory = Path(directory)
    if not source.exists():
        raise MissingPathError("Source file not found", source)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")
    target = directory / source.name
    try:
        shutil.copy2(source, target)
    except OSError as e:
        raise_classified(e, target)
    return target


def write_string(path: PathLike, text: str, encoding: str = "utf-8") -> Path:
    """Write ``text`` to ``path``, replacing its contents. Returns the path."""
    path = Path(path)
    try:
        path.write_text(text, encoding=encoding)
    except OSError as e:
        raise_classified(e, path)
    return path
