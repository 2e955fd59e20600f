"""
Build tool orchestration core

Main modules:
- core: Core data models, enums and error kinds
- config: Global configuration, project file and environment context
- build: Database tiers, collision detection, queries, path info and the build pipeline
- cli: Command-line interface
"""

from .core.models import Plan, Task, TaskType, LocalPackage, PackageIdentifier
from .config.env_context import EnvContext, load_env_context
from .build.pipeline import BuildPipeline, build
from .build.query import select, query_build_info
from .build.collisions import detect_collisions

__version__ = "1.0.0"
__all__ = [
    'Plan',
    'Task',
    'TaskType',
    'LocalPackage',
    'PackageIdentifier',
    'EnvContext',
    'load_env_context',
    'BuildPipeline',
    'build',
    'select',
    'query_build_info',
    'detect_collisions',
]
