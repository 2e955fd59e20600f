#!/usr/bin/env python3
"""
CLI tool for building projects and inspecting build information
"""

import asyncio
import click
import logging
import sys
from typing import List, Optional, Sequence

from ..build.collaborators import load_collaborators
from ..build.database import installation_root_deps
from ..build.lock import SnapshotLockManager
from ..build.path_info import PATHS, deprecation_notices, render_paths
from ..build.pipeline import build
from ..build.query import query_build_info
from ..config.env_context import EnvContext, load_env_context
from ..config.global_config_loader import GlobalConfig, load_global_config
from ..core.errors import BuildError
from ..core.models import BuildOptsCLI


class BuildCLI:
    """Command-line interface for builds"""

    def __init__(self, global_config: GlobalConfig, project_path: str):
        self.global_config = global_config
        self.project_path = project_path
        self.logger = logging.getLogger(__name__)

    def _env_context(self, build_opts_cli: Optional[BuildOptsCLI] = None) -> EnvContext:
        return load_env_context(self.global_config, self.project_path, build_opts_cli)

    async def run_build(self, targets: Sequence[str], dry_run: bool, initial_build_steps: bool) -> int:
        """Build the project while holding the snapshot lock"""
        try:
            ctx = self._env_context(BuildOptsCLI(
                targets=tuple(targets),
                dry_run=dry_run,
                initial_build_steps=initial_build_steps,
            ))
            collaborators = load_collaborators(self.global_config)
            lock_manager = SnapshotLockManager(
                installation_root_deps(ctx),
                timeout=self.global_config.lock_timeout,
            )
            if lock_manager.is_locked():
                self.logger.info(
                    f"Waiting up to {lock_manager.timeout}s for another build "
                    f"to release the snapshot lock: {lock_manager.lock_file_path}"
                )
            async with lock_manager:
                report = await build(ctx, collaborators, lock=lock_manager)
        except (BuildError, TimeoutError) as e:
            click.echo(f"Error: {e}", err=True)
            return 1

        if report.released_lock_early:
            self.logger.info("Snapshot lock was released before execution")
        if not report.dry_run:
            click.echo(f"Built {len(report.plan.tasks)} package(s)")
        return 0

    def query(self, selectors: Sequence[str]) -> int:
        """Print selected build information as YAML"""
        try:
            output = query_build_info(self._env_context(), selectors)
        except BuildError as e:
            click.echo(f"Error: {e}", err=True)
            return 1
        click.echo(output, nl=not output.endswith("\n"))
        return 0

    def path(self, keys: List[str]) -> int:
        """Print path information"""
        for notice in deprecation_notices(keys):
            click.echo(f"\n{notice}\n", err=True)
        try:
            lines = render_paths(self._env_context(), keys)
        except BuildError as e:
            click.echo(f"Error: {e}", err=True)
            return 1
        for line in lines:
            click.echo(line)
        return 0


def _path_options(func):
    for path_key in reversed(PATHS):
        func = click.option(
            f"--{path_key.key}", path_key.key.replace('-', '_'),
            is_flag=True, help=path_key.description,
        )(func)
    return func


@click.group()
@click.option('--global-config', default=None, help='Path to global config YAML')
@click.option('--project', default='project.yaml', show_default=True, help='Path to the project file')
@click.option('--log-level', default='INFO',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              help='Set the logging level')
@click.pass_context
def cli(ctx, global_config, project, log_level):
    """Build tool - plans and runs builds of a project and its dependencies"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    try:
        global_cfg = load_global_config(global_config)
    except BuildError as e:
        raise click.ClickException(str(e))

    ctx.ensure_object(dict)
    ctx.obj['global_config'] = global_cfg
    ctx.obj['cli'] = BuildCLI(global_cfg, project)


@cli.command(name='build')
@click.argument('targets', nargs=-1)
@click.option('--dry-run', is_flag=True, help="Print the plan instead of executing it")
@click.option('--initial-build-steps', is_flag=True, help="Only perform the initial build steps")
@click.pass_context
def build_command(ctx, targets, dry_run, initial_build_steps):
    """Build the project"""
    cli_instance = ctx.obj['cli']
    return_code = asyncio.run(cli_instance.run_build(targets, dry_run, initial_build_steps))
    sys.exit(return_code or 0)


@cli.command()
@click.argument('selectors', nargs=-1)
@click.pass_context
def query(ctx, selectors):
    """Query build information, e.g. 'query locals mypackage version'"""
    cli_instance = ctx.obj['cli']
    sys.exit(cli_instance.query(list(selectors)) or 0)


@cli.command()
@_path_options
@click.pass_context
def path(ctx, **selected):
    """Print out useful path information"""
    cli_instance = ctx.obj['cli']
    keys = [p.key for p in PATHS if selected[p.key.replace('-', '_')]]
    sys.exit(cli_instance.path(keys) or 0)


if __name__ == "__main__":
    cli()
