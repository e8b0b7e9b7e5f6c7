"""
Tests for the read-only attribute adapter.
"""

import os
import stat
import tempfile
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pathkit import (
    MissingPathError,
    UnsupportedAttributeError,
    get_attribute_view,
    is_read_only,
    make_searchable,
    set_read_only,
    write_string,
)
from pathkit.attributes import AttributeView, DosAttributeView, PosixAttributeView


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


class RecordingView(AttributeView):
    """A fake view that records calls."""

    def __init__(self, name, supported):
        self.name = name
        self.supported = supported
        self.calls = []
        self.read_only = False

    def supports(self, path, follow_symlinks=True):
        self.calls.append("supports")
        return self.supported

    def is_read_only(self, path, follow_symlinks=True):
        return self.read_only

    def set_read_only(self, path, read_only, follow_symlinks=True):
        self.calls.append(("set", read_only))
        self.read_only = read_only


def snapshot(path: Path) -> dict:
    """Attributes that must not change when toggling read-only."""
    st = os.lstat(path)
    return {
        "regular": path.is_file(),
        "executable": bool(st.st_mode & stat.S_IXUSR),
        "hidden": path.name.startswith(".") or bool(
            getattr(st, "st_file_attributes", 0) & getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0)
        ),
        "directory": path.is_dir(),
        "symlink": path.is_symlink(),
    }


class TestDispatch:
    """Capability probing and dispatch."""

    def test_first_supported_view_wins(self, temp_dir):
        """DOS is probed first and used when supported."""
        dos = RecordingView("dos", True)
        posix = RecordingView("posix", True)

        assert get_attribute_view(temp_dir, views=[dos, posix]) is dos
        assert posix.calls == []

    def test_falls_back_to_second_view(self, temp_dir):
        """POSIX is used when DOS is not supported."""
        dos = RecordingView("dos", False)
        posix = RecordingView("posix", True)

        set_read_only(temp_dir, True, views=[dos, posix])

        assert ("set", True) in posix.calls
        assert ("set", True) not in dos.calls

    def test_unsupported(self, temp_dir):
        """No supported view is an UnsupportedAttributeError."""
        with pytest.raises(UnsupportedAttributeError):
            set_read_only(temp_dir, True, views=[RecordingView("dos", False)])

    def test_probe_is_not_cached(self, temp_dir):
        """Every call probes again."""
        dos = RecordingView("dos", True)

        set_read_only(temp_dir, True, views=[dos])
        set_read_only(temp_dir, False, views=[dos])

        assert dos.calls.count("supports") == 2

    def test_native_view(self, temp_dir):
        """The default views pick the platform's mechanism."""
        view = get_attribute_view(temp_dir)
        if os.name == "nt":
            assert isinstance(view, DosAttributeView)
        else:
            assert isinstance(view, PosixAttributeView)

    def test_missing_path(self, temp_dir):
        """Probing a missing path fails with MissingPathError."""
        with pytest.raises(MissingPathError):
            set_read_only(temp_dir / "nope.txt", True)


class TestSetReadOnly:
    """Toggling the read-only state on real files."""

    def test_toggle_file(self, temp_dir):
        """true -> false -> true is idempotent and keeps other attributes."""
        path = write_string(temp_dir / "test_set_read_only.txt", "test")
        before = snapshot(path)
        assert not is_read_only(path)

        set_read_only(path, False)
        assert not is_read_only(path)
        assert snapshot(path) == before

        set_read_only(path, True)
        assert is_read_only(path)
        assert snapshot(path) == before

        set_read_only(path, True)
        assert is_read_only(path)
        assert snapshot(path) == before

        set_read_only(path, False)
        assert not is_read_only(path)
        assert snapshot(path) == before

    def test_returns_path(self, temp_dir):
        path = write_string(temp_dir / "a.txt", "a")
        assert set_read_only(str(path), False) == path

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_posix_clears_all_write_bits(self, temp_dir):
        """Read-only clears owner, group and others write bits only."""
        path = write_string(temp_dir / "perm.txt", "x")
        os.chmod(path, 0o775)

        set_read_only(path, True)

        mode = stat.S_IMODE(os.stat(path).st_mode)
        assert mode == 0o555
        assert not mode & (stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH)

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_posix_keeps_execute_bits(self, temp_dir):
        """Execute bits survive a round trip."""
        path = write_string(temp_dir / "script.sh", "#!/bin/sh\n")
        os.chmod(path, 0o751)

        set_read_only(path, True)
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o551
        set_read_only(path, False)
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o751

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_posix_writable_adds_owner_read_write(self, temp_dir):
        path = write_string(temp_dir / "locked.txt", "x")
        os.chmod(path, 0o044)

        set_read_only(path, False)

        assert stat.S_IMODE(os.stat(path).st_mode) == 0o644

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_make_searchable(self, temp_dir):
        """A directory gains owner read and search, nothing else."""
        sub = temp_dir / "sub"
        sub.mkdir()
        os.chmod(sub, 0o044)
        try:
            assert make_searchable(sub) == sub
            assert stat.S_IMODE(os.stat(sub).st_mode) == 0o544
            make_searchable(sub)
            assert stat.S_IMODE(os.stat(sub).st_mode) == 0o544
        finally:
            os.chmod(sub, 0o755)

    @pytest.mark.skipif(os.name != "nt", reason="DOS attributes")
    def test_dos_keeps_hidden(self, temp_dir):
        """The DOS hidden attribute is left alone."""
        import ctypes

        path = write_string(temp_dir / "hidden.txt", "x")
        ctypes.windll.kernel32.SetFileAttributesW(str(path), stat.FILE_ATTRIBUTE_HIDDEN)

        set_read_only(path, True)
        attrs = os.stat(path).st_file_attributes
        assert attrs & stat.FILE_ATTRIBUTE_READONLY
        assert attrs & stat.FILE_ATTRIBUTE_HIDDEN

        set_read_only(path, False)
        attrs = os.stat(path).st_file_attributes
        assert not attrs & stat.FILE_ATTRIBUTE_READONLY
        assert attrs & stat.FILE_ATTRIBUTE_HIDDEN

    def test_directory(self, temp_dir):
        """Directories can be toggled too."""
        sub = temp_dir / "sub"
        sub.mkdir()

        set_read_only(sub, True)
        assert is_read_only(sub)
        assert sub.is_dir()
        set_read_only(sub, False)
        assert not is_read_only(sub)

    @pytest.mark.skipif(os.name == "nt", reason="Symbolic links need privileges on Windows")
    def test_follows_links_by_default(self, temp_dir):
        """The link target changes, the link stays a link."""
        target = write_string(temp_dir / "target.txt", "x")
        link = temp_dir / "link.txt"
        os.symlink(target, link)

        set_read_only(link, True)

        assert is_read_only(target)
        assert link.is_symlink()
        set_read_only(target, False)
