"""
Error kinds raised by the build orchestration core.
"""
import json
from typing import Iterable, List, Sequence, Tuple

from .models import NamedComponent, PackageIdentifier


class BuildError(Exception):
    """Base class for all fatal build errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(BuildError):
    """Configuration file is missing required data or is malformed"""


class CollaboratorImportError(BuildError):
    """An import string for an external collaborator could not be resolved"""


class UnbuildableComponentsError(BuildError):
    """Some local components are declared but cannot be built"""

    def __init__(self, unbuildable: Iterable[Tuple[str, NamedComponent]]):
        self.unbuildable: List[Tuple[str, NamedComponent]] = sorted(unbuildable)
        details = ", ".join(f"{name}:{component}" for name, component in self.unbuildable)
        super().__init__(
            "The following components have 'buildable: False' set in their "
            f"package description and cannot be built: {details}"
        )


class DisallowedLocalInstallError(BuildError):
    """The plan would install local packages where that is not permitted"""

    def __init__(self, identifiers: Iterable[PackageIdentifier]):
        self.identifiers: List[PackageIdentifier] = sorted(identifiers)
        names = ", ".join(str(ident) for ident in self.identifiers)
        super().__init__(
            "Local packages are not allowed in this build, but the plan "
            f"would install: {names}"
        )


class IncompatibleToolchainConstraintError(BuildError):
    """A requested flag is not supported by the toolchain in use"""


class SelectorError(BuildError):
    """A query selector could not be applied"""

    def __init__(self, reason: str, path: Sequence[str]):
        self.reason = reason
        self.path = list(path)
        super().__init__(f"{reason}: {json.dumps(self.path)}")


class SelectorNotFoundError(SelectorError):
    def __init__(self, path: Sequence[str]):
        super().__init__("Selector not found", path)


class SelectorIndexOutOfRangeError(SelectorError):
    def __init__(self, path: Sequence[str]):
        super().__init__("Index out of range", path)


class SelectorTypeMismatchError(SelectorError):
    pass
