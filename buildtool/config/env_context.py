"""
Immutable environment context threaded through the build.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Mapping, Optional, Tuple

from ..core.models import BuildOpts, BuildOptsCLI, LocalPackage, SourceMap, Version, parse_version
from .global_config_loader import GlobalConfig, ToolchainConfig
from .project_loader import ProjectConfig, ProjectLoader


@dataclass(frozen=True)
class EnvContext:
    """Everything one build invocation needs to know about its environment"""
    config: GlobalConfig
    project_root: Path
    config_path: Path
    snapshot_id: str
    locals: Tuple[LocalPackage, ...] = ()
    dependency_locals: Tuple[LocalPackage, ...] = ()
    source_map: SourceMap = field(default_factory=SourceMap)
    build_opts_cli: BuildOptsCLI = field(default_factory=BuildOptsCLI)
    search_path: Tuple[str, ...] = ()

    @property
    def build_opts(self) -> BuildOpts:
        return self.config.build

    @property
    def toolchain(self) -> ToolchainConfig:
        return self.config.toolchain

    @property
    def platform(self) -> str:
        return self.config.toolchain.platform

    @property
    def actual_compiler(self) -> str:
        return self.config.toolchain.actual_compiler

    @property
    def wanted_compiler(self) -> str:
        return self.config.toolchain.wanted_compiler

    @property
    def cabal_version(self) -> Version:
        return parse_version(self.config.toolchain.cabal_version)

    @property
    def root(self) -> Path:
        return Path(self.config.paths.root).expanduser()

    @property
    def all_locals(self) -> Tuple[LocalPackage, ...]:
        return self.locals + self.dependency_locals

    @property
    def local_names(self) -> FrozenSet[str]:
        return frozenset(lp.name for lp in self.locals)


def load_env_context(
    config: GlobalConfig,
    project_path: str,
    build_opts_cli: Optional[BuildOptsCLI] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EnvContext:
    """Combine global configuration and the project file into an EnvContext"""
    project: ProjectConfig = ProjectLoader.load_from_yaml(project_path)
    build_opts_cli = build_opts_cli or BuildOptsCLI()
    environ = os.environ if environ is None else environ
    search_path = tuple(p for p in environ.get('PATH', '').split(os.pathsep) if p)

    return EnvContext(
        config=config,
        project_root=project.root,
        config_path=project.path,
        snapshot_id=project.snapshot,
        locals=project.locals,
        dependency_locals=project.dependency_locals,
        source_map=project.source_map(build_opts_cli.targets),
        build_opts_cli=build_opts_cli,
        search_path=search_path,
    )
