"""
Options accepted by the delete operations.
"""

from enum import Enum
from typing import Iterable, Set, Union


class DeleteOption(Enum):
    """Tokens that change how a delete behaves."""
    OVERRIDE_READ_ONLY = "override_read_only"

    @classmethod
    def parse(cls, name: str) -> "DeleteOption":
        """
        Resolve a config or CLI string to an option.

        Accepts either the member name or its value, in any case.

        Raises:
            ValueError: If the name matches no option
        """
        key = name.strip()
        for option in cls:
            if key.upper() == option.name or key.lower() == option.value:
                return option
        raise ValueError(f"Unknown delete option: {name}")


def overrides_read_only(options: Iterable[DeleteOption]) -> bool:
    """Check whether OVERRIDE_READ_ONLY is among the given options."""
    return DeleteOption.OVERRIDE_READ_ONLY in set(options)


def parse_options(names: Union[str, Iterable[str], None]) -> Set[DeleteOption]:
    """Parse option names (e.g. from YAML) into a set of options. A single name is allowed."""
    if isinstance(names, str):
        names = [names]
    return {DeleteOption.parse(name) for name in names or []}
