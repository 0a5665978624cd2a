"""The shell's environment: an ordered list of NAME=value entries."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


def env_header(entry: str) -> str:
    """Return the variable name of a NAME=value entry."""
    return entry.partition("=")[0]


class Environment:
    """Ordered environment entries plus the last exit status."""

    def __init__(self, entries: Iterable[str]) -> None:
        self.entries: list[str] = list(entries)
        self.exit_value: int = 0

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def index_of(self, name: str) -> int | None:
        """Return the position of the first entry called *name*, or None."""
        for index, entry in enumerate(self.entries):
            if env_header(entry) == name:
                return index
        return None

    def lookup(self, name: str) -> str | None:
        """Return the value of *name*; "?" gives the last exit status."""
        if name == "?":
            return str(self.exit_value)
        index = self.index_of(name)
        if index is None:
            return None
        return self.entries[index].partition("=")[2]

    def contains(self, name: str) -> bool:
        """Return True if *name* has a value."""
        return self.lookup(name) is not None

    def update(self, name: str, value: str) -> None:
        """Replace the value of an existing variable; unknown names are ignored."""
        index = self.index_of(name)
        if index is not None:
            self.entries[index] = f"{name}={value}"

    def remove(self, names: Iterable[str]) -> None:
        """Remove the first entry of each name given."""
        for name in names:
            if name == "?":
                continue
            index = self.index_of(name)
            if index is not None:
                del self.entries[index]

    def as_dict(self) -> dict[str, str]:
        """Return the variables as a mapping; the first entry of a name wins."""
        result: dict[str, str] = {}
        for entry in self.entries:
            name, _, value = entry.partition("=")
            result.setdefault(name, value)
        return result