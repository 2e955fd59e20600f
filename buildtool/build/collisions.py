"""
Detects executables with the same name that would overwrite each other.
"""
import logging
from dataclasses import dataclass
from itertools import groupby
from operator import itemgetter
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from ..core.models import LocalPackage, PackageIdentifier, Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutableCollision:
    """
    An executable name that is built more than once, or that is built while
    another local package declares an executable with the same name.
    """
    executable: str
    building: Tuple[str, ...]
    shadowed: Tuple[str, ...] = ()

    def render(self) -> str:
        """Human-readable warning text"""
        if len(self.building) > 1:
            exe_s = "several executables with the same name:"
        else:
            exe_s = "executable"

        lines = [f"Building {exe_s} {self._exes_text(self.building)}."]
        if len(self.building) > 1:
            lines.append(
                "Only one of them will be available via 'exec' or locally installed."
            )
        if self.shadowed:
            lines.append(
                "Other executables with the same name might be overwritten: "
                f"{self._exes_text(self.shadowed)}."
            )
        return "\n".join(lines)

    def _exes_text(self, packages: Sequence[str]) -> str:
        return ", ".join(f"'{package}:{self.executable}'" for package in packages)


def _collect(pairs: Iterable[Tuple[str, str]]) -> Dict[str, Tuple[str, ...]]:
    """Group (executable, package) pairs by executable into sorted, non-empty tuples"""
    grouped = {}
    for exe, group in groupby(sorted(set(pairs)), key=itemgetter(0)):
        grouped[exe] = tuple(package for _, package in group)
    return grouped


def detect_collisions(
    targets: Mapping[PackageIdentifier, Task],
    locals: Sequence[LocalPackage],
) -> Dict[str, ExecutableCollision]:
    """
    Find executable names that would be installed more than once.

    Only tasks building from a local file path contribute executables to
    build. Every executable declared by any local package counts as a
    potential victim of being overwritten.
    """
    exes_to_build = _collect(
        (exe, task.provides.name)
        for task in targets.values()
        if task.task_type.is_file_path
        for exe in task.task_type.local_package.exe_components()
    )
    local_exes = _collect(
        (exe, lp.package.name)
        for lp in locals
        for exe in lp.package.executables
    )

    collisions = {}
    for exe in sorted(exes_to_build.keys() & local_exes.keys()):
        building = exes_to_build[exe]
        other_locals = tuple(p for p in local_exes[exe] if p not in building)
        if len(building) == 1 and not other_locals:
            continue
        collisions[exe] = ExecutableCollision(
            executable=exe,
            building=building,
            shadowed=other_locals,
        )
    return collisions


def warn_about_collisions(
    targets: Mapping[PackageIdentifier, Task],
    locals: Sequence[LocalPackage],
) -> List[ExecutableCollision]:
    """Log a warning for every executable name collision and return them"""
    logger.debug("Checking if we are going to build multiple executables with the same name")
    collisions = list(detect_collisions(targets, locals).values())
    for collision in collisions:
        logger.warning(collision.render())
    return collisions
