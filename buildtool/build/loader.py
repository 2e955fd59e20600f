"""
Package loading callback handed to the plan constructor.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Tuple

from ..config.env_context import EnvContext
from ..core.models import Package
from .collaborators import LoadPackage, PackageDescriptionLoader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageConfig:
    """Settings a package description is resolved against"""
    enable_tests: bool
    enable_benchmarks: bool
    flags: Tuple[Tuple[str, bool], ...]
    ghc_options: Tuple[str, ...]
    compiler_version: str
    platform: str

    @property
    def flag_map(self) -> Dict[str, bool]:
        return dict(self.flags)


@dataclass
class PackageLoaderCache:
    """Memoizes loaded packages so repeated requests resolve identically"""
    loaded: Dict[Tuple[str, PackageConfig], Package] = field(default_factory=dict)


def make_package_loader(
    ctx: EnvContext,
    description_loader: PackageDescriptionLoader,
    cache: PackageLoaderCache = None,
) -> LoadPackage:
    """
    Provide a function for loading package information from the package index.

    Tests and benchmarks are never enabled for packages loaded this way.
    """
    cache = cache or PackageLoaderCache()

    def load_package(location: str, flags: Dict[str, bool], ghc_options) -> Package:
        package_config = PackageConfig(
            enable_tests=False,
            enable_benchmarks=False,
            flags=tuple(sorted((flags or {}).items())),
            ghc_options=tuple(ghc_options or ()),
            compiler_version=ctx.actual_compiler,
            platform=ctx.platform,
        )
        key = (location, package_config)
        if key not in cache.loaded:
            logger.debug(f"Loading package description from {location}")
            cache.loaded[key] = description_loader.load(location, package_config)
        return cache.loaded[key]

    return load_package
