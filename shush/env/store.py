import os
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Mapping, Optional, Tuple


class EnvironmentStore(ABC):
    """Read/remove/set access to a set of environment variables."""

    @abstractmethod
    def items(self) -> Iterable[Tuple[str, str]]:
        ...

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, name: str, value: str):
        ...

    @abstractmethod
    def remove(self, name: str):
        ...

    def snapshot(self) -> Dict[str, str]:
        """Copy of the current variables, as handed to a child process."""
        return dict(self.items())


class OsEnvironmentStore(EnvironmentStore):
    """The live process environment."""

    def items(self):
        return list(os.environ.items())

    def get(self, name):
        return os.environ.get(name)

    def set(self, name, value):
        os.environ[name] = value

    def remove(self, name):
        os.environ.pop(name, None)


class MappingEnvironmentStore(EnvironmentStore):
    """In-memory environment, leaves the process untouched."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self.vars = dict(initial or {})

    def items(self):
        return list(self.vars.items())

    def get(self, name):
        return self.vars.get(name)

    def set(self, name, value):
        # same rule os.environ enforces
        if "\x00" in name or "\x00" in value:
            raise ValueError("embedded null byte")
        self.vars[name] = value

    def remove(self, name):
        self.vars.pop(name, None)
