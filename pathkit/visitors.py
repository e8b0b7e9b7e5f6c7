"""
Directory-tree traversal with pluggable visitors.

walk() visits children before their parent directory is finished, so a
visitor can remove entries in visit_file() and the then-empty directory in
post_visit_directory(). Symbolic links are reported as files and never
followed.
"""

import os
import stat
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .attributes import is_read_only, make_searchable, set_read_only
from .counters import Counters, PathCounters
from .errors import raise_classified
from .filters import PathFilter
from .options import DeleteOption, overrides_read_only


PathLike = Union[str, os.PathLike]


def _lstat(path: Path) -> os.stat_result:
    try:
        return os.lstat(path)
    except OSError as e:
        raise_classified(e, path)


def _list_directory(path: Path) -> List[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as e:
        raise_classified(e, path)
    # Reversed so that pop() hands them out in name order
    return sorted(entries, key=lambda entry: entry.name, reverse=True)


class PathVisitor:
    """Callbacks invoked by walk(). The defaults visit everything."""

    def pre_visit_directory(self, path: Path, st: os.stat_result) -> bool:
        """Called before a directory's entries. Return False to skip it."""
        return True

    def visit_file(self, path: Path, st: os.stat_result) -> None:
        """Called for every non-directory entry, including symbolic links."""

    def post_visit_directory(self, path: Path) -> None:
        """Called once all entries of an accepted directory were visited."""


def walk(root: PathLike, visitor: PathVisitor) -> PathVisitor:
    """
    Walk a tree depth-first, children before parents.

    Args:
        root: File or directory to start from
        visitor: Receives the callbacks

    Returns:
        The visitor, for chaining

    Raises:
        MissingPathError: If ``root`` does not exist
    """
    root = Path(root)
    st = _lstat(root)
    if not stat.S_ISDIR(st.st_mode):
        visitor.visit_file(root, st)
        return visitor

    if not visitor.pre_visit_directory(root, st):
        return visitor

    stack: List[Tuple[Path, List[os.DirEntry]]] = [(root, _list_directory(root))]
    while stack:
        directory, entries = stack[-1]
        if not entries:
            stack.pop()
            visitor.post_visit_directory(directory)
            continue

        entry = entries.pop()
        path = Path(entry.path)
        try:
            entry_stat = entry.stat(follow_symlinks=False)
        except OSError as e:
            raise_classified(e, path)

        if stat.S_ISDIR(entry_stat.st_mode):
            if visitor.pre_visit_directory(path, entry_stat):
                stack.append((path, _list_directory(path)))
        else:
            visitor.visit_file(path, entry_stat)

    return visitor


def _file_size(st: os.stat_result) -> int:
    return st.st_size if stat.S_ISREG(st.st_mode) else 0


class CountingVisitor(PathVisitor):
    """
    Counts files, directories and bytes, and remembers what it saw.

    A directory rejected by ``directory_filter`` is skipped along with
    everything below it. The starting directory is always counted.
    """

    def __init__(
        self,
        file_filter: Optional[PathFilter] = None,
        directory_filter: Optional[PathFilter] = None
    ):
        self.counters = Counters()
        self.file_filter = file_filter
        self.directory_filter = directory_filter
        self.files: List[Path] = []
        self.directories: List[Path] = []
        self._root_seen = False

    def pre_visit_directory(self, path, st):
        if self._root_seen and self.directory_filter is not None:
            if not self.directory_filter.accept(path):
                return False
        self._root_seen = True
        self.counters.add_directory()
        self.directories.append(path)
        return True

    def visit_file(self, path, st):
        if self.file_filter is None or self.file_filter.accept(path):
            self.counters.add_file(_file_size(st))
            self.files.append(path)

    @property
    def path_counters(self) -> PathCounters:
        return self.counters.snapshot()


class DeletingVisitor(PathVisitor):
    """
    Deletes every entry it visits.

    Entries whose name is in ``skip`` are kept, as is every directory that
    still holds something afterwards. With OVERRIDE_READ_ONLY, read-only
    files are made writable before removal, and directories are made writable
    and searchable before their entries are removed.
    """

    def __init__(self, *options: DeleteOption, skip: Iterable[str] = ()):
        self.counters = Counters()
        self.options = set(options)
        self.override_read_only = overrides_read_only(self.options)
        self.skip = frozenset(skip)

    def _make_writable(self, path: Path) -> None:
        if is_read_only(path, follow_symlinks=False):
            set_read_only(path, False, follow_symlinks=False)

    def pre_visit_directory(self, path, st):
        if path.name in self.skip:
            return False
        if self.override_read_only:
            self._make_writable(path)
            make_searchable(path)
        return True

    def visit_file(self, path, st):
        if path.name in self.skip:
            return
        is_link = stat.S_ISLNK(st.st_mode)
        if self.override_read_only and not is_link:
            self._make_writable(path)
        try:
            os.unlink(path)
        except OSError as e:
            raise_classified(e, path)
        self.counters.add_file(_file_size(st))

    def post_visit_directory(self, path):
        try:
            with os.scandir(path) as it:
                if next(it, None) is not None:
                    return
        except OSError as e:
            raise_classified(e, path)
        try:
            os.rmdir(path)
        except OSError as e:
            raise_classified(e, path, directory=True)
        self.counters.add_directory()

    @property
    def path_counters(self) -> PathCounters:
        return self.counters.snapshot()
