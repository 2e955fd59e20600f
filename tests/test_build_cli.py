"""End-to-end tests for the command-line interface."""

import asyncio
import logging

import pytest
import yaml
from click.testing import CliRunner

import fake_collaborators
from buildtool.build.lock import SnapshotLockManager
from buildtool.cli.build_cli import cli


@pytest.fixture
def workspace(tmp_path):
    project = tmp_path / "project" / "project.yaml"
    project.parent.mkdir()
    project.write_text(yaml.safe_dump({
        'snapshot': 'lts-21.25',
        'packages': [
            {'name': 'app', 'version': '0.1.0', 'executables': ['app']},
        ],
    }))
    global_config = tmp_path / "global_config.yaml"
    global_config.write_text(yaml.safe_dump({
        'paths': {'root': str(tmp_path / "root")},
        'lock_timeout': 1,
        'collaborators': {
            'installed_prober': 'fake_collaborators:create_prober',
            'plan_constructor': 'fake_collaborators:create_plan_constructor',
            'executor': 'fake_collaborators:create_executor',
            'package_loader': 'fake_collaborators:create_package_loader',
        },
    }))
    return ['--global-config', str(global_config), '--project', str(project)]


class TestQueryCommand:

    def test_query_version(self, workspace):
        result = CliRunner().invoke(cli, workspace + ['query', 'locals', 'app', 'version'])

        assert result.exit_code == 0
        assert result.output.strip() == '0.1.0'

    def test_query_missing_selector(self, workspace):
        result = CliRunner().invoke(cli, workspace + ['query', 'locals', 'nope'])

        assert result.exit_code == 1
        assert 'Selector not found: ["locals", "nope"]' in result.output


class TestPathCommand:

    def test_single_key(self, workspace, tmp_path):
        result = CliRunner().invoke(cli, workspace + ['path', '--project-root'])

        assert result.exit_code == 0
        assert result.output.strip() == str((tmp_path / "project").resolve())

    def test_two_keys_are_prefixed(self, workspace):
        result = CliRunner().invoke(cli, workspace + ['path', '--local-pkg-db', '--dist-dir'])

        assert result.exit_code == 0
        lines = [line for line in result.output.splitlines() if line.startswith(('local-pkg-db:', 'dist-dir:'))]
        assert len(lines) == 2


class TestBuildCommand:

    def test_build_runs_executor(self, workspace):
        fake_collaborators.EXECUTED.clear()

        result = CliRunner().invoke(cli, workspace + ['build'])

        assert result.exit_code == 0, result.output
        assert fake_collaborators.EXECUTED == [['app-0.1.0']]

    def test_dry_run(self, workspace):
        fake_collaborators.EXECUTED.clear()

        result = CliRunner().invoke(cli, workspace + ['build', '--dry-run'])

        assert result.exit_code == 0, result.output
        assert 'Would build:' in result.output
        assert fake_collaborators.EXECUTED == []

    def test_contended_snapshot_lock(self, workspace, tmp_path, caplog):
        caplog.set_level(logging.INFO, logger="buildtool.cli.build_cli")
        snapshot_root = tmp_path / "root" / "snapshots" / "x86_64-linux" / "lts-21.25" / "ghc-9.4.7"
        holder = SnapshotLockManager(snapshot_root, timeout=1)
        asyncio.run(holder.acquire())
        try:
            result = CliRunner().invoke(cli, workspace + ['build'])
        finally:
            asyncio.run(holder.release())

        assert result.exit_code == 1
        assert 'Could not acquire snapshot lock' in result.output
        assert 'Waiting up to 1s for another build' in caplog.text
