"""
Package database tiers and installation roots.

Lookup goes global -> extra -> snapshot -> local; a package registered in a
later tier shadows one of the same name in an earlier tier.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

from ..config.env_context import EnvContext
from ..core.enums import DatabaseTier
from ..core.models import BuildOpts, BuildOptsCLI

PACKAGE_DB_DIR = "pkgdb"


def path_no_trailing_sep(path) -> str:
    """Render a path without trailing separators; the filesystem root is kept as is"""
    text = os.fspath(path)
    separators = os.sep + (os.altsep or "")
    stripped = text.rstrip(separators)
    return stripped or text[:1]


def path_component(text: str) -> str:
    return text.replace(os.sep, "-")


@dataclass(frozen=True)
class DatabaseLocation:
    tier: DatabaseTier
    path: Path

    def render(self) -> str:
        return path_no_trailing_sep(self.path)


@dataclass(frozen=True)
class DatabaseTierSet:
    """The four package database tiers; extras keep their declaration order"""
    global_db: Path
    extra_dbs: Tuple[Path, ...]
    snapshot_db: Path
    local_db: Path

    def ordered(self) -> Tuple[DatabaseLocation, ...]:
        """All locations in lookup order"""
        return (
            (DatabaseLocation(DatabaseTier.GLOBAL, self.global_db),)
            + tuple(DatabaseLocation(DatabaseTier.EXTRA, db) for db in self.extra_dbs)
            + (
                DatabaseLocation(DatabaseTier.SNAPSHOT, self.snapshot_db),
                DatabaseLocation(DatabaseTier.LOCAL, self.local_db),
            )
        )

    def resolve(self, contains: Callable[[Path], bool]) -> Optional[DatabaseLocation]:
        """
        Find the database that provides something.

        Tiers are consulted front to back and the last one for which
        ``contains`` holds wins, so later tiers shadow earlier ones.
        """
        found = None
        for location in self.ordered():
            if contains(location.path):
                found = location
        return found

    def package_path(self) -> str:
        """Value for the compiler's package path variable, highest precedence first"""
        highest_first = [location.render() for location in reversed(self.ordered())]
        return os.pathsep.join(highest_first)


@dataclass(frozen=True)
class BaseConfigOpts:
    """Everything needed to construct configure options for a package"""
    snapshot_db: Path
    local_db: Path
    snapshot_install_root: Path
    local_install_root: Path
    build_opts: BuildOpts
    build_opts_cli: BuildOptsCLI
    extra_dbs: Tuple[Path, ...]


def installation_root_deps(ctx: EnvContext) -> Path:
    """Install root shared by every project using the same snapshot"""
    return (
        ctx.root / "snapshots" / ctx.platform
        / path_component(ctx.snapshot_id) / ctx.actual_compiler
    )


def installation_root_local(ctx: EnvContext) -> Path:
    """Install root private to the project"""
    return (
        ctx.project_root / ctx.config.paths.work_dir / "install" / ctx.platform
        / path_component(ctx.snapshot_id) / ctx.actual_compiler
    )


def package_database_deps(ctx: EnvContext) -> Path:
    return installation_root_deps(ctx) / PACKAGE_DB_DIR


def package_database_local(ctx: EnvContext) -> Path:
    return installation_root_local(ctx) / PACKAGE_DB_DIR


def package_database_extra(ctx: EnvContext) -> Tuple[Path, ...]:
    return tuple(Path(db).expanduser() for db in ctx.config.extra_package_dbs)


def package_database_global(ctx: EnvContext) -> Path:
    return Path(ctx.toolchain.global_db).expanduser()


def resolve_database_tiers(ctx: EnvContext) -> DatabaseTierSet:
    return DatabaseTierSet(
        global_db=package_database_global(ctx),
        extra_dbs=package_database_extra(ctx),
        snapshot_db=package_database_deps(ctx),
        local_db=package_database_local(ctx),
    )


def mk_base_config_opts(ctx: EnvContext) -> BaseConfigOpts:
    """Get the BaseConfigOpts necessary for constructing configure options"""
    tiers = resolve_database_tiers(ctx)
    return BaseConfigOpts(
        snapshot_db=tiers.snapshot_db,
        local_db=tiers.local_db,
        snapshot_install_root=installation_root_deps(ctx),
        local_install_root=installation_root_local(ctx),
        build_opts=ctx.build_opts,
        build_opts_cli=ctx.build_opts_cli,
        extra_dbs=tiers.extra_dbs,
    )
