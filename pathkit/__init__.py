# pathkit - file-system utilities
"""
Convenience wrappers around file-system operations: counted delete with
read-only override, read-only toggling, copying and name filtering.
"""

from .attributes import (
    AttributeView,
    DosAttributeView,
    PosixAttributeView,
    get_attribute_view,
    is_read_only,
    make_searchable,
    set_read_only,
)
from .counters import Counters, PathCounters
from .errors import (
    PathKitError,
    MissingPathError,
    NotEmptyError,
    PermissionDeniedError,
    UnsupportedAttributeError,
)
from .logger import AuditLogger, AuditEntry
from .options import DeleteOption
from .paths import (
    accumulate,
    copy_file_to_directory,
    count_directory,
    delete,
    delete_directory,
    delete_file,
    is_empty,
    is_empty_directory,
    write_string,
)
from .policy import PathPolicy

__all__ = [
    "AttributeView",
    "DosAttributeView",
    "PosixAttributeView",
    "get_attribute_view",
    "is_read_only",
    "make_searchable",
    "set_read_only",
    "Counters",
    "PathCounters",
    "PathKitError",
    "MissingPathError",
    "NotEmptyError",
    "PermissionDeniedError",
    "UnsupportedAttributeError",
    "AuditLogger",
    "AuditEntry",
    "DeleteOption",
    "accumulate",
    "copy_file_to_directory",
    "count_directory",
    "delete",
    "delete_directory",
    "delete_file",
    "is_empty",
    "is_empty_directory",
    "write_string",
    "PathPolicy",
]

__version__ = "0.1.0"
