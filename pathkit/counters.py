"""
Counters for files, directories and bytes touched by a path operation.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PathCounters:
    """Immutable snapshot of what an operation affected."""
    file_count: int = 0
    directory_count: int = 0
    byte_count: int = 0

    def __add__(self, other: "PathCounters") -> "PathCounters":
        if not isinstance(other, PathCounters):
            return NotImplemented
        return PathCounters(
            file_count=self.file_count + other.file_count,
            directory_count=self.directory_count + other.directory_count,
            byte_count=self.byte_count + other.byte_count
        )

    def to_dict(self) -> dict:
        return {
            "files": self.file_count,
            "directories": self.directory_count,
            "bytes": self.byte_count,
        }

    def __str__(self) -> str:
        return (
            f"{self.file_count} files, {self.directory_count} directories, "
            f"{self.byte_count} bytes"
        )


class Counters:
    """
    Mutable accumulator used while a single operation runs.

    Values only ever grow. Read the result with snapshot() once the
    operation has completed.
    """

    def __init__(self):
        self._files = 0
        self._directories = 0
        self._bytes = 0

    @staticmethod
    def _check(amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Counters cannot decrease (got {amount})")

    def add_file(self, size: int = 0) -> None:
        """
        Record one file.

        Args:
            size: Size of the file in bytes
        """
        self._check(size)
        self._files += 1
        self._bytes += size

    def add_directory(self) -> None:
        """Record one directory."""
        self._directories += 1

    def add_bytes(self, amount: int) -> None:
        self._check(amount)
        self._bytes += amount

    @property
    def file_count(self) -> int:
        return self._files

    @property
    def directory_count(self) -> int:
        return self._directories

    @property
    def byte_count(self) -> int:
        return self._bytes

    def snapshot(self) -> PathCounters:
        """Return the current values as an immutable PathCounters."""
        return PathCounters(self._files, self._directories, self._bytes)

    def __eq__(self, other) -> bool:
        if isinstance(other, Counters):
            return self.snapshot() == other.snapshot()
        if isinstance(other, PathCounters):
            return self.snapshot() == other
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"Counters(files={self._files}, directories={self._directories}, "
            f"bytes={self._bytes})"
        )
