"""
Composable filters over file names and paths.

Filters look at the final component of a path unless stated otherwise, so
``RegexFileFilter("^test.*")`` accepts ``/src/test_a.py`` but not
``/test/a.py``.
"""

import fnmatch
import os
import re
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Pattern, Union


PathLike = Union[str, os.PathLike]


class CaseSensitivity(Enum):
    """How names are compared."""
    SENSITIVE = "sensitive"
    INSENSITIVE = "insensitive"
    SYSTEM = "system"

    @property
    def is_sensitive(self) -> bool:
        if self is CaseSensitivity.SYSTEM:
            return os.name != "nt"
        return self is CaseSensitivity.SENSITIVE

    def normalize(self, text: str) -> str:
        return text if self.is_sensitive else text.casefold()


class PathFilter:
    """
    Base class for filters.

    Subclasses implement accept_name(); accept() splits a path into its
    parent directory and name and delegates to it.
    """

    def accept(self, path: Optional[PathLike]) -> bool:
        """
        Check whether a path passes the filter.

        Args:
            path: Path to test, None is never accepted

        Returns:
            True if the path is accepted
        """
        if path is None:
            return False
        p = Path(path)
        return self.accept_name(p.parent, p.name)

    def accept_name(self, directory: Optional[PathLike], name: str) -> bool:
        raise NotImplementedError

    def __call__(self, path: Optional[PathLike]) -> bool:
        return self.accept(path)

    def __and__(self, other: "PathFilter") -> "PathFilter":
        return AndFileFilter(self, other)

    def __or__(self, other: "PathFilter") -> "PathFilter":
        return OrFileFilter(self, other)

    def __invert__(self) -> "PathFilter":
        return NotFileFilter(self)


class TrueFileFilter(PathFilter):
    """Accepts everything except None."""

    def accept_name(self, directory, name):
        return True


class FalseFileFilter(PathFilter):
    """Accepts nothing."""

    def accept_name(self, directory, name):
        return False


def _file_name(path: Path) -> str:
    return path.name


class RegexFileFilter(PathFilter):
    """
    Accepts paths whose name matches a regular expression.

    The whole string must match (``re.fullmatch``), so anchors are optional.
    By default only the name is matched; pass ``path_to_string=str`` to
    match the full path instead.
    """

    def __init__(
        self,
        pattern: Union[str, Pattern],
        case: CaseSensitivity = CaseSensitivity.SENSITIVE,
        flags: int = 0,
        path_to_string: Callable[[Path], str] = _file_name
    ):
        """
        Args:
            pattern: Regular expression as a string or compiled pattern
            case: Case handling, ignored when ``pattern`` is already compiled
            flags: Extra ``re`` flags for string patterns
            path_to_string: Turns the Path being tested into the string
                that is matched, the file name by default

        Raises:
            ValueError: If the pattern is None or not a valid expression
        """
        if pattern is None:
            raise ValueError("Pattern is missing")
        if path_to_string is None:
            raise ValueError("path_to_string is missing")
        self.path_to_string = path_to_string
        if isinstance(pattern, re.Pattern):
            self.pattern = pattern
        else:
            if not case.is_sensitive:
                flags |= re.IGNORECASE
            try:
                self.pattern = re.compile(pattern, flags)
            except re.error as e:
                raise ValueError(f"Invalid regular expression {pattern!r}: {e}") from e

    def accept(self, path: Optional[PathLike]) -> bool:
        if path is None:
            return False
        return self.pattern.fullmatch(self.path_to_string(Path(path))) is not None

    def accept_name(self, directory, name):
        if directory is None:
            return self.accept(name)
        return self.accept(Path(directory) / name)

    def __repr__(self) -> str:
        return f"RegexFileFilter({self.pattern.pattern!r})"


class _NamesFilter(PathFilter):
    """Shared setup for filters built from a list of names or patterns."""

    def __init__(self, *names: str, case: CaseSensitivity = CaseSensitivity.SENSITIVE):
        if not names or any(n is None for n in names):
            raise ValueError(f"{type(self).__name__} needs at least one name")
        self.case = case
        self.names: List[str] = list(names)

    def _normalized(self) -> List[str]:
        return [self.case.normalize(n) for n in self.names]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(map(repr, self.names))})"


class NameFileFilter(_NamesFilter):
    """Accepts names equal to one of the given names."""

    def accept_name(self, directory, name):
        return self.case.normalize(name) in self._normalized()


class WildcardFileFilter(_NamesFilter):
    """Accepts names matching one of the given shell-style wildcards."""

    def accept_name(self, directory, name):
        target = self.case.normalize(name)
        return any(fnmatch.fnmatchcase(target, p) for p in self._normalized())


class SuffixFileFilter(_NamesFilter):
    """Accepts names ending with one of the given suffixes."""

    def accept_name(self, directory, name):
        return self.case.normalize(name).endswith(tuple(self._normalized()))


class PrefixFileFilter(_NamesFilter):
    """Accepts names starting with one of the given prefixes."""

    def accept_name(self, directory, name):
        return self.case.normalize(name).startswith(tuple(self._normalized()))


class FileFileFilter(PathFilter):
    """Accepts regular files (symbolic links are not followed)."""

    def accept_name(self, directory, name):
        path = Path(directory or ".") / name
        return path.is_file() and not path.is_symlink()


class DirectoryFileFilter(PathFilter):
    """Accepts directories (symbolic links are not followed)."""

    def accept_name(self, directory, name):
        path = Path(directory or ".") / name
        return path.is_dir() and not path.is_symlink()


class AndFileFilter(PathFilter):
    """Accepts what every wrapped filter accepts."""

    def __init__(self, *filters: PathFilter):
        if not filters:
            raise ValueError("AndFileFilter needs at least one filter")
        self.filters = list(filters)

    def accept_name(self, directory, name):
        return all(f.accept_name(directory, name) for f in self.filters)


class OrFileFilter(PathFilter):
    """Accepts what any wrapped filter accepts."""

    def __init__(self, *filters: PathFilter):
        if not filters:
            raise ValueError("OrFileFilter needs at least one filter")
        self.filters = list(filters)

    def accept_name(self, directory, name):
        return any(f.accept_name(directory, name) for f in self.filters)


class NotFileFilter(PathFilter):
    """Inverts a filter."""

    def __init__(self, wrapped: PathFilter):
        if wrapped is None:
            raise ValueError("NotFileFilter needs a filter")
        self.wrapped = wrapped

    def accept_name(self, directory, name):
        return not self.wrapped.accept_name(directory, name)
