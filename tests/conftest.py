"""Pytest configuration and fixtures for buildtool tests."""

import copy
import sys
from pathlib import Path
from typing import Iterable, Optional
from unittest.mock import AsyncMock, Mock

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from buildtool.build.collaborators import (
    BuildCollaborators, Executor, InstalledProber, PackageDescriptionLoader,
    PlanConstructor, PreFetcher
)
from buildtool.config.env_context import EnvContext
from buildtool.config.global_config_loader import GlobalConfig
from buildtool.core.enums import ComponentKind, TaskLocation
from buildtool.core.models import (
    BuildOpts, BuildOptsCLI, InstalledResult, LocalPackage, NamedComponent,
    Package, PackageIdentifier, Plan, SourceMap, Task, TaskType, parse_version
)


def make_local(
    name: str,
    exes: Iterable[str] = (),
    building: Optional[Iterable[str]] = None,
    version: str = "0.1.0",
    unbuildable: Iterable[str] = (),
    root: Path = Path("/work/project"),
) -> LocalPackage:
    """Local package declaring `exes`, building `building` (defaults to all of them)"""
    exes = frozenset(exes)
    building = exes if building is None else frozenset(building)
    directory = root / name
    return LocalPackage(
        package=Package(name=name, version=parse_version(version), executables=exes),
        cabal_file=directory / f"{name}.cabal",
        components=frozenset(
            [NamedComponent(ComponentKind.LIBRARY)]
            + [NamedComponent(ComponentKind.EXECUTABLE, exe) for exe in building]
        ),
        unbuildable=frozenset(NamedComponent.parse(c) for c in unbuildable),
        files=frozenset([directory / f"{name}.cabal", directory / "src" / "Lib.hs"]),
    )


def local_task(lp: LocalPackage) -> Task:
    return Task(
        provides=lp.package.identifier,
        task_type=TaskType.from_file_path(lp),
        location=TaskLocation.LOCAL,
    )


def snapshot_task(name: str, version: str = "1.0") -> Task:
    ident = PackageIdentifier(name, parse_version(version))
    return Task(
        provides=ident,
        task_type=TaskType.from_immutable(f"index:{ident}"),
        location=TaskLocation.SNAPSHOT,
    )


@pytest.fixture
def global_config(tmp_path) -> GlobalConfig:
    config = GlobalConfig.default()
    config.paths.root = str(tmp_path / "root")
    config.toolchain.global_db = str(tmp_path / "ghc" / "package.conf.d")
    config.toolchain.compiler_exe = str(tmp_path / "ghc" / "bin" / "ghc")
    config.extra_package_dbs = [str(tmp_path / "extra1"), str(tmp_path / "extra2")]
    return config


@pytest.fixture
def make_ctx(tmp_path, global_config):
    """Factory for EnvContext values built from synthetic locals"""
    def _make_ctx(
        locals=(),
        dependency_locals=(),
        build_opts: Optional[BuildOpts] = None,
        build_opts_cli: Optional[BuildOptsCLI] = None,
        **config_overrides,
    ) -> EnvContext:
        # Each context gets its own config so later overrides never leak into it
        config = copy.deepcopy(global_config)
        if build_opts is not None:
            config.build = build_opts
        for key, value in config_overrides.items():
            setattr(config, key, value)
        locals = tuple(locals)
        return EnvContext(
            config=config,
            project_root=tmp_path / "project",
            config_path=tmp_path / "project" / "project.yaml",
            snapshot_id="lts-21.25",
            locals=locals,
            dependency_locals=tuple(dependency_locals),
            source_map=SourceMap(
                targets=tuple(lp.name for lp in locals),
                project={lp.name: lp for lp in locals},
            ),
            build_opts_cli=build_opts_cli or BuildOptsCLI(),
            search_path=("/usr/bin", "/bin"),
        )
    return _make_ctx


@pytest.fixture
def collaborators():
    """Collaborators that return an empty plan unless told otherwise"""
    prober = Mock(spec=InstalledProber)
    prober.get_installed = AsyncMock(return_value=InstalledResult(
        installed_map={"base": "global"},
        global_dumps=["global-dump"],
        snapshot_dumps=["snapshot-dump"],
        local_dumps=["local-dump"],
    ))

    constructor = Mock(spec=PlanConstructor)
    constructor.construct_plan = AsyncMock(return_value=Plan())

    executor = Mock(spec=Executor)
    executor.execute_plan = AsyncMock(return_value=None)

    pre_fetcher = Mock(spec=PreFetcher)
    pre_fetcher.fetch_packages = AsyncMock(return_value=None)

    return BuildCollaborators(
        installed_prober=prober,
        plan_constructor=constructor,
        executor=executor,
        package_loader=Mock(spec=PackageDescriptionLoader),
        pre_fetcher=pre_fetcher,
    )
