"""
Build pipeline that sequences planning and execution of a build.
"""
import inspect
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Set

from ..config.env_context import EnvContext
from ..core.errors import (
    DisallowedLocalInstallError, IncompatibleToolchainConstraintError,
    UnbuildableComponentsError
)
from ..core.models import (
    BuildOpts, GetInstalledOpts, LocalPackage, Plan, version_string
)
from .collaborators import BuildCollaborators
from .collisions import warn_about_collisions
from .database import mk_base_config_opts
from .loader import make_package_loader
from .models import BuildReport, LockDecision
from .plan import all_local, disallowed_locals, immutable_locations, print_plan

logger = logging.getLogger(__name__)

# --allow-newer needs at least this version of the Cabal library
MIN_CABAL_VERSION_ALLOW_NEWER = (1, 22)

SPLIT_OBJS_WARNING = " ".join([
    "Note that this feature is EXPERIMENTAL, and its behavior may be changed and improved.",
    "You will need to clean your workdirs before use. If you want to compile all dependencies",
    "with split-objs, you will need to delete the snapshot (and all snapshots that could",
    "reference that snapshot).",
])


def lock_decision(plan: Plan) -> LockDecision:
    # A plan with any snapshot task keeps the lock for the whole execution,
    # even if the snapshot work would finish early.
    if all_local(plan):
        return LockDecision.RELEASE_EARLY
    return LockDecision.RETAIN


async def maybe_release_early(plan: Plan, lock: Any) -> bool:
    """
    Release the snapshot lock if this build cannot write to the snapshot.

    The lock must protect the snapshot, and it must be safe to unlock it once
    no further modifications to the snapshot will be made by this build.
    Errors from releasing propagate.

    Returns:
        True if the lock was released
    """
    if lock is None or lock_decision(plan) != LockDecision.RELEASE_EARLY:
        return False

    logger.debug("All installs are local; releasing snapshot lock early.")
    result = lock.release()
    if inspect.isawaitable(result):
        await result
    return True


def check_components_buildable(local_packages: Iterable[LocalPackage]):
    unbuildable = [
        (lp.name, component)
        for lp in local_packages
        for component in lp.unbuildable
    ]
    if unbuildable:
        raise UnbuildableComponentsError(unbuildable)


def check_cabal_version(ctx: EnvContext):
    cabal_version = ctx.cabal_version
    if ctx.config.allow_newer and cabal_version < MIN_CABAL_VERSION_ALLOW_NEWER:
        raise IncompatibleToolchainConstraintError(
            "Error: --allow-newer requires at least Cabal version "
            f"{version_string(MIN_CABAL_VERSION_ALLOW_NEWER)}, but version "
            f"{version_string(cabal_version)} was found."
        )


def warn_about_split_objs(build_opts: BuildOpts):
    if build_opts.split_objs:
        logger.warning(f"Building with --split-objs is enabled. {SPLIT_OBJS_WARNING}")


def gather_local_files(ctx: EnvContext) -> Set[Path]:
    """Files of every local package plus the project file itself"""
    files = {ctx.config_path}
    for lp in ctx.all_locals:
        files.update(lp.files)
    return files


class BuildPipeline:
    """
    Orchestrates one build: validation, probing, planning, then either
    printing or executing the plan.
    """

    def __init__(
        self,
        ctx: EnvContext,
        collaborators: BuildCollaborators,
        set_local_files: Optional[Callable[[Set[Path]], None]] = None,
    ):
        """
        Initialize build pipeline.

        Args:
            ctx: Environment context for this invocation
            collaborators: Prober, plan constructor, executor and friends
            set_local_files: Called once with every local file, for file watching
        """
        self.ctx = ctx
        self.collaborators = collaborators
        self.set_local_files = set_local_files
        self.logger = logging.getLogger(__name__)

    async def build(self, lock: Any = None) -> BuildReport:
        """
        Run the build.

        Args:
            lock: Snapshot lock held by the caller, released early when the
                plan only touches the local install tree

        Returns:
            BuildReport describing what happened
        """
        ctx = self.ctx
        bopts = ctx.build_opts
        bopts_cli = ctx.build_opts_cli

        if self.set_local_files is not None:
            self.set_local_files(gather_local_files(ctx))

        check_components_buildable(ctx.all_locals)

        install_map = ctx.source_map.to_install_map()
        installed = await self.collaborators.installed_prober.get_installed(
            GetInstalledOpts(
                profiling=bopts.profiling,
                haddock=bopts.should_haddock_deps(),
                symbols=bopts.symbols,
            ),
            install_map,
        )

        base_config = mk_base_config_opts(ctx)
        load_package = make_package_loader(ctx, self.collaborators.package_loader)
        plan = await self.collaborators.plan_constructor.construct_plan(
            base_config,
            installed.local_dumps,
            load_package,
            ctx.source_map,
            installed.installed_map,
            bopts_cli.initial_build_steps,
        )
        self.logger.debug(f"Plan contains {len(plan.tasks)} tasks")

        if not ctx.config.allow_locals:
            disallowed = disallowed_locals(plan, ctx.local_names)
            if disallowed:
                raise DisallowedLocalInstallError(disallowed)

        report = BuildReport(plan=plan, lock_decision=lock_decision(plan), dry_run=bopts_cli.dry_run)
        report.released_lock_early = await maybe_release_early(plan, lock)

        check_cabal_version(ctx)
        warn_about_split_objs(bopts)
        report.collisions = warn_about_collisions(plan.tasks, ctx.locals)

        if bopts.pre_fetch:
            await self._pre_fetch(plan)

        if bopts_cli.dry_run:
            print_plan(plan)
            return report

        await self.collaborators.executor.execute_plan(
            bopts_cli,
            base_config,
            ctx.locals,
            installed.global_dumps,
            installed.snapshot_dumps,
            installed.local_dumps,
            installed.installed_map,
            ctx.source_map.targets,
            plan,
        )
        report.executed = True
        return report

    async def _pre_fetch(self, plan: Plan):
        locations = immutable_locations(plan)
        if not locations:
            self.logger.debug("Nothing to pre-fetch")
            return
        if self.collaborators.pre_fetcher is None:
            self.logger.warning("Pre-fetching requested but no pre-fetcher is configured")
            return
        self.logger.info(f"Prefetching: {', '.join(locations)}")
        await self.collaborators.pre_fetcher.fetch_packages(locations)


async def build(
    ctx: EnvContext,
    collaborators: BuildCollaborators,
    lock: Any = None,
    set_local_files: Optional[Callable[[Set[Path]], None]] = None,
) -> BuildReport:
    """Build the project"""
    return await BuildPipeline(ctx, collaborators, set_local_files).build(lock)
