"""
Build orchestration: database tiers, planning checks and the build pipeline.
"""

from .models import BuildReport, LockDecision
from .collisions import ExecutableCollision, detect_collisions
from .database import BaseConfigOpts, DatabaseTierSet, mk_base_config_opts, resolve_database_tiers
from .lock import SnapshotLockManager
from .pipeline import BuildPipeline, build, maybe_release_early

__all__ = [
    'BuildReport',
    'LockDecision',
    'ExecutableCollision',
    'detect_collisions',
    'BaseConfigOpts',
    'DatabaseTierSet',
    'mk_base_config_opts',
    'resolve_database_tiers',
    'SnapshotLockManager',
    'BuildPipeline',
    'build',
    'maybe_release_early',
]
