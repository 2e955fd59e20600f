"""
Models for build pipeline results.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..core.models import Plan
from .collisions import ExecutableCollision


class LockDecision(Enum):
    """What happens to the snapshot lock once the plan is known"""
    RELEASE_EARLY = "release_early"
    RETAIN = "retain"


@dataclass
class BuildReport:
    """Outcome of one pipeline run"""
    plan: Optional[Plan] = None
    lock_decision: Optional[LockDecision] = None
    released_lock_early: bool = False
    collisions: List[ExecutableCollision] = field(default_factory=list)
    dry_run: bool = False
    executed: bool = False
