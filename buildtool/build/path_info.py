"""
Handy path information in a human-readable format.

Trailing separators are removed from every directory so that output is
stable for scripts.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Sequence, Tuple

from ..config.env_context import EnvContext
from ..core.models import version_string
from .database import (
    DatabaseTierSet, path_component, installation_root_deps,
    installation_root_local, path_no_trailing_sep, resolve_database_tiers
)

DOC_DIR = "doc"


@dataclass(frozen=True)
class PathInfo:
    """Passed to all the path printers as a source of info"""
    ctx: EnvContext
    tiers: DatabaseTierSet
    snapshot_root: Path
    local_root: Path
    tools_dir: Path
    hoogle_root: Path
    dist_dir: Path
    hpc_dir: Path
    compiler: Path

    @property
    def bin_path(self) -> str:
        entries = [
            path_no_trailing_sep(self.local_root / "bin"),
            path_no_trailing_sep(self.snapshot_root / "bin"),
            path_no_trailing_sep(self.tools_dir),
            path_no_trailing_sep(self.compiler.parent),
        ]
        for entry in self.ctx.search_path:
            if entry not in entries:
                entries.append(entry)
        return os.pathsep.join(entries)


def fill_path_info(ctx: EnvContext) -> PathInfo:
    local_root = installation_root_local(ctx)
    work_dir = Path(ctx.config.paths.work_dir)
    return PathInfo(
        ctx=ctx,
        tiers=resolve_database_tiers(ctx),
        snapshot_root=installation_root_deps(ctx),
        local_root=local_root,
        tools_dir=Path(ctx.toolchain.compiler_tools_bin).expanduser(),
        hoogle_root=(
            ctx.project_root / work_dir / "hoogle" / ctx.platform
            / path_component(ctx.snapshot_id) / ctx.actual_compiler
        ),
        dist_dir=work_dir / "dist" / ctx.platform / f"Cabal-{version_string(ctx.cabal_version)}",
        hpc_dir=local_root / "hpc",
        compiler=Path(ctx.toolchain.compiler_exe).expanduser(),
    )


@dataclass(frozen=True)
class PathKey:
    description: str
    key: str
    extract: Callable[[PathInfo], str]
    replaced_by: str = None

    @property
    def deprecated(self) -> bool:
        return self.replaced_by is not None


def _dir(get: Callable[[PathInfo], Path]) -> Callable[[PathInfo], str]:
    return lambda pi: path_no_trailing_sep(get(pi))


PATHS: Tuple[PathKey, ...] = (
    PathKey("Global root directory", "root",
            _dir(lambda pi: pi.ctx.root)),
    PathKey("Project root (derived from the project file)", "project-root",
            _dir(lambda pi: pi.ctx.project_root)),
    PathKey("Configuration location (where the project file is)", "config-location",
            lambda pi: str(pi.ctx.config_path)),
    PathKey("PATH environment variable", "bin-path",
            lambda pi: pi.bin_path),
    PathKey("Install location for the compiler and other core tools", "programs",
            _dir(lambda pi: Path(pi.ctx.config.paths.programs).expanduser())),
    PathKey("Compiler binary (e.g. ghc)", "compiler-exe",
            lambda pi: str(pi.compiler)),
    PathKey("Directory containing the compiler binary (e.g. ghc)", "compiler-bin",
            _dir(lambda pi: pi.compiler.parent)),
    PathKey("Directory containing binaries specific to a particular compiler", "compiler-tools-bin",
            _dir(lambda pi: pi.tools_dir)),
    PathKey("Local bin dir where executables are installed (e.g. ~/.local/bin)", "local-bin",
            _dir(lambda pi: Path(pi.ctx.config.paths.local_bin).expanduser())),
    PathKey("Extra include directories", "extra-include-dirs",
            lambda pi: ", ".join(sorted(set(pi.ctx.config.extra_include_dirs)))),
    PathKey("Extra library directories", "extra-library-dirs",
            lambda pi: ", ".join(sorted(set(pi.ctx.config.extra_lib_dirs)))),
    PathKey("Snapshot package database", "snapshot-pkg-db",
            _dir(lambda pi: pi.tiers.snapshot_db)),
    PathKey("Local project package database", "local-pkg-db",
            _dir(lambda pi: pi.tiers.local_db)),
    PathKey("Global package database", "global-pkg-db",
            _dir(lambda pi: pi.tiers.global_db)),
    PathKey("GHC_PACKAGE_PATH environment variable", "ghc-package-path",
            lambda pi: pi.tiers.package_path()),
    PathKey("Snapshot installation root", "snapshot-install-root",
            _dir(lambda pi: pi.snapshot_root)),
    PathKey("Local project installation root", "local-install-root",
            _dir(lambda pi: pi.local_root)),
    PathKey("Snapshot documentation root", "snapshot-doc-root",
            _dir(lambda pi: pi.snapshot_root / DOC_DIR)),
    PathKey("Local project documentation root", "local-doc-root",
            _dir(lambda pi: pi.local_root / DOC_DIR)),
    PathKey("Local project hoogle root", "local-hoogle-root",
            _dir(lambda pi: pi.hoogle_root)),
    PathKey("Dist work directory, relative to package directory", "dist-dir",
            _dir(lambda pi: pi.dist_dir)),
    PathKey("Where HPC reports and tix files are stored", "local-hpc-root",
            _dir(lambda pi: pi.hpc_dir)),
    PathKey("DEPRECATED: Use '--local-bin' instead", "local-bin-path",
            _dir(lambda pi: Path(pi.ctx.config.paths.local_bin).expanduser()),
            replaced_by="local-bin"),
    PathKey("DEPRECATED: Use '--programs' instead", "ghc-paths",
            _dir(lambda pi: Path(pi.ctx.config.paths.programs).expanduser()),
            replaced_by="programs"),
    PathKey("DEPRECATED: Use '--root' instead", "global-root",
            _dir(lambda pi: pi.ctx.root),
            replaced_by="root"),
)


def select_paths(keys: Sequence[str]) -> List[PathKey]:
    """Chosen paths, or every non-deprecated path if none were chosen"""
    return [
        path for path in PATHS
        if (not keys and not path.deprecated) or path.key in keys
    ]


def deprecation_notices(keys: Sequence[str]) -> List[str]:
    return [
        f"'--{path.key}' will be removed in a future release.\n"
        f"Please use '--{path.replaced_by}' instead."
        for path in PATHS
        if path.deprecated and path.key in keys
    ]


def render_paths(ctx: EnvContext, keys: Sequence[str] = ()) -> List[str]:
    """One line per selected path, prefixed by its key unless exactly one was selected"""
    selected = select_paths(keys)
    single = len(selected) == 1
    path_info = fill_path_info(ctx)
    lines = []
    for path in selected:
        prefix = "" if single else f"{path.key}: "
        lines.append(f"{prefix}{path.extract(path_info)}")
    return lines
