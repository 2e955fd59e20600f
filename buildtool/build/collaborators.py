"""
Interfaces of the components the build core drives but does not implement.
"""
import importlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from ..core.errors import CollaboratorImportError, ConfigurationError
from ..core.models import (
    GetInstalledOpts, InstalledResult, LocalPackage, Package, Plan,
    SourceMap, BuildOptsCLI
)
from .database import BaseConfigOpts

if TYPE_CHECKING:
    from ..config.global_config_loader import GlobalConfig
    from .loader import PackageConfig

logger = logging.getLogger(__name__)

# (location, flag overrides, compiler options) -> Package
LoadPackage = Callable[[str, Dict[str, bool], Tuple[str, ...]], Package]


class InstalledProber(ABC):
    """Enumerates packages that are already installed"""

    @abstractmethod
    async def get_installed(
        self,
        options: GetInstalledOpts,
        install_map: Dict[str, Any],
    ) -> InstalledResult:
        pass


class PlanConstructor(ABC):
    """Builds the dependency graph and decides what needs building"""

    @abstractmethod
    async def construct_plan(
        self,
        base_config: BaseConfigOpts,
        local_dumps: List[Any],
        load_package: LoadPackage,
        source_map: SourceMap,
        installed_map: Dict[str, Any],
        initial_build_steps: bool,
    ) -> Plan:
        pass


class Executor(ABC):
    """Runs the tasks of a plan, respecting their dependency ordering"""

    @abstractmethod
    async def execute_plan(
        self,
        build_opts_cli: BuildOptsCLI,
        base_config: BaseConfigOpts,
        locals: Sequence[LocalPackage],
        global_dumps: List[Any],
        snapshot_dumps: List[Any],
        local_dumps: List[Any],
        installed_map: Dict[str, Any],
        targets: Sequence[str],
        plan: Plan,
    ) -> None:
        pass


class PackageDescriptionLoader(ABC):
    """Reads and resolves the package description found at a location"""

    @abstractmethod
    def load(self, location: str, package_config: 'PackageConfig') -> Package:
        pass


class PreFetcher(ABC):
    """Downloads immutable package locations ahead of the build"""

    @abstractmethod
    async def fetch_packages(self, locations: Sequence[str]) -> None:
        pass


@dataclass
class BuildCollaborators:
    installed_prober: InstalledProber
    plan_constructor: PlanConstructor
    executor: Executor
    package_loader: PackageDescriptionLoader
    pre_fetcher: Optional[PreFetcher] = None


def import_object(import_string: str) -> Any:
    """Resolve 'package.module:attribute'"""
    module_name, sep, attribute = import_string.partition(':')
    if not sep or not module_name or not attribute:
        raise CollaboratorImportError(
            f"Invalid import string {import_string!r}, expected 'module:attribute'"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise CollaboratorImportError(f"Cannot import {module_name!r}: {e}")

    obj = module
    for part in attribute.split('.'):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise CollaboratorImportError(
                f"Module {module_name!r} has no attribute {attribute!r}"
            )
    return obj


def load_collaborators(config: 'GlobalConfig') -> BuildCollaborators:
    """
    Instantiate collaborators from the import strings in configuration.

    Each import string names a factory called with the global configuration.
    """
    settings = config.collaborators
    required = ('installed_prober', 'plan_constructor', 'executor', 'package_loader')
    missing = [name for name in required if not getattr(settings, name)]
    if missing:
        raise ConfigurationError(
            f"Missing collaborators in configuration: {', '.join(missing)}"
        )

    def create(name: str):
        import_string = getattr(settings, name)
        if not import_string:
            return None
        factory = import_object(import_string)
        logger.debug(f"Creating {name} from {import_string}")
        return factory(config)

    return BuildCollaborators(
        installed_prober=create('installed_prober'),
        plan_constructor=create('plan_constructor'),
        executor=create('executor'),
        package_loader=create('package_loader'),
        pre_fetcher=create('pre_fetcher'),
    )
