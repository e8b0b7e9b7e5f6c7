"""
Read-only attribute handling across platforms.

Windows exposes DOS file attributes, everything else POSIX permission bits.
Each call probes which view the target supports and dispatches to it; the
result of the probe is never cached.
"""

import os
import stat
from pathlib import Path
from typing import Optional, Sequence, Union

from .errors import UnsupportedAttributeError, raise_classified


PathLike = Union[str, os.PathLike]

POSIX_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


def _stat(path: PathLike, follow_symlinks: bool) -> os.stat_result:
    try:
        return os.stat(path, follow_symlinks=follow_symlinks)
    except OSError as e:
        raise_classified(e, path)


class AttributeView:
    """A strategy for reading and writing the read-only state of a node."""

    name = "abstract"

    def supports(self, path: PathLike, follow_symlinks: bool = True) -> bool:
        raise NotImplementedError

    def is_read_only(self, path: PathLike, follow_symlinks: bool = True) -> bool:
        raise NotImplementedError

    def set_read_only(self, path: PathLike, read_only: bool, follow_symlinks: bool = True) -> None:
        raise NotImplementedError

    def make_searchable(self, path: PathLike) -> None:
        """Let the owner list and enter a directory. A no-op where there is no such permission."""

    def _chmod(self, path: PathLike, mode: int, follow_symlinks: bool) -> None:
        link = not follow_symlinks and os.path.islink(path)
        if link and os.chmod not in os.supports_follow_symlinks:
            raise UnsupportedAttributeError(
                f"Cannot change {self.name} attributes of a symbolic link on this platform", path
            )
        try:
            if link:
                os.chmod(path, mode, follow_symlinks=False)
            else:
                os.chmod(path, mode)
        except OSError as e:
            raise_classified(e, path)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


class DosAttributeView(AttributeView):
    """DOS attributes, as reported by ``st_file_attributes`` on Windows."""

    name = "dos"

    def supports(self, path: PathLike, follow_symlinks: bool = True) -> bool:
        return hasattr(_stat(path, follow_symlinks), "st_file_attributes")

    def is_read_only(self, path: PathLike, follow_symlinks: bool = True) -> bool:
        st = _stat(path, follow_symlinks)
        return bool(st.st_file_attributes & stat.FILE_ATTRIBUTE_READONLY)

    def set_read_only(self, path: PathLike, read_only: bool, follow_symlinks: bool = True) -> None:
        # On Windows os.chmod only flips FILE_ATTRIBUTE_READONLY; hidden,
        # system and archive bits are left as they are.
        mode = stat.S_IREAD if read_only else stat.S_IREAD | stat.S_IWRITE
        self._chmod(path, mode, follow_symlinks)


class PosixAttributeView(AttributeView):
    """POSIX permission bits."""

    name = "posix"

    def supports(self, path: PathLike, follow_symlinks: bool = True) -> bool:
        _stat(path, follow_symlinks)
        return os.name == "posix"

    def is_read_only(self, path: PathLike, follow_symlinks: bool = True) -> bool:
        st = _stat(path, follow_symlinks)
        return not st.st_mode & stat.S_IWUSR

    def set_read_only(self, path: PathLike, read_only: bool, follow_symlinks: bool = True) -> None:
        current = stat.S_IMODE(_stat(path, follow_symlinks).st_mode)
        if read_only:
            mode = current & ~POSIX_WRITE_BITS
        else:
            mode = current | stat.S_IRUSR | stat.S_IWUSR
        if mode != current:
            self._chmod(path, mode, follow_symlinks)

    def make_searchable(self, path: PathLike) -> None:
        current = stat.S_IMODE(_stat(path, False).st_mode)
        mode = current | stat.S_IRUSR | stat.S_IXUSR
        if mode != current:
            self._chmod(path, mode, False)


DEFAULT_VIEWS: Sequence[AttributeView] = (DosAttributeView(), PosixAttributeView())


def get_attribute_view(
    path: PathLike,
    follow_symlinks: bool = True,
    views: Optional[Sequence[AttributeView]] = None
) -> AttributeView:
    """
    Probe the attribute views in order and return the first supported one.

    Args:
        path: Path whose file system is probed
        follow_symlinks: Probe the link target (True) or the link itself
        views: Views to try, DOS first then POSIX by default

    Returns:
        The AttributeView to use for this path

    Raises:
        MissingPathError: If the path does not exist
        UnsupportedAttributeError: If no view supports the path
    """
    for view in views if views is not None else DEFAULT_VIEWS:
        if view.supports(path, follow_symlinks):
            return view
    raise UnsupportedAttributeError("No DOS or POSIX attribute view available", path)


def is_read_only(
    path: PathLike,
    follow_symlinks: bool = True,
    views: Optional[Sequence[AttributeView]] = None
) -> bool:
    """Report whether the node at ``path`` is currently read-only."""
    return get_attribute_view(path, follow_symlinks, views).is_read_only(path, follow_symlinks)


def set_read_only(
    path: PathLike,
    read_only: bool,
    follow_symlinks: bool = True,
    views: Optional[Sequence[AttributeView]] = None
) -> Path:
    """
    Make a node read-only or writable.

    Setting read-only clears the write bits for owner, group and others on
    POSIX, or sets the DOS READONLY attribute on Windows. Clearing it makes
    the node writable for its owner. No other attribute is changed, and
    applying the same state twice has no further effect.

    Args:
        path: Path to the node
        read_only: Desired read-only state
        follow_symlinks: Change the link target (True) or the link itself
        views: Views to try, DOS first then POSIX by default

    Returns:
        The path, as a Path

    Raises:
        MissingPathError: If the path does not exist
        UnsupportedAttributeError: If no view supports the path
        PermissionDeniedError: If the system refuses the change
    """
    view = get_attribute_view(path, follow_symlinks, views)
    view.set_read_only(path, read_only, follow_symlinks)
    return Path(path)


def make_searchable(
    path: PathLike,
    views: Optional[Sequence[AttributeView]] = None
) -> Path:
    """
    Give the owner read and search permission on a directory.

    Only the POSIX view changes anything; DOS attributes have no search bit.
    Symbolic links are not followed.
    """
    view = get_attribute_view(path, False, views)
    view.make_searchable(path)
    return Path(path)
