"""
Queries over a build plan, and the dry-run plan printer.
"""
from typing import AbstractSet, List

from ..core.enums import TaskLocation
from ..core.models import PackageIdentifier, Plan, Task


def all_local(plan: Plan) -> bool:
    """If all the tasks are local, they don't mutate anything outside of our local directory"""
    return all(task.location == TaskLocation.LOCAL for task in plan.tasks.values())


def just_locals(plan: Plan) -> List[PackageIdentifier]:
    """Identifiers of every task writing to the local install tree"""
    return sorted(
        task.provides for task in plan.tasks.values()
        if task.location == TaskLocation.LOCAL
    )


def disallowed_locals(plan: Plan, local_names: AbstractSet[str]) -> List[PackageIdentifier]:
    """Local-tree installs of packages that are not part of the declared local set"""
    return [ident for ident in just_locals(plan) if ident.name not in local_names]


def immutable_locations(plan: Plan) -> List[str]:
    """Fetched package locations the plan will need, in a stable order"""
    return sorted({
        task.task_type.location
        for task in plan.tasks.values()
        if not task.task_type.is_file_path
    })


def _describe_task(task: Task) -> str:
    if task.task_type.is_file_path:
        source = f"source={task.task_type.local_package.directory}"
    else:
        source = f"source={task.task_type.location}"
    parts = [f"database={task.location.value}", source]
    if task.dependencies:
        parts.append("after: " + ", ".join(str(dep) for dep in sorted(task.dependencies)))
    return f"{task.provides}: " + ", ".join(parts)


def format_plan(plan: Plan) -> List[str]:
    """Lines describing what a plan would do"""
    lines = []
    if plan.unregister:
        lines.append("Would unregister locally:")
        for ident, reason in sorted(plan.unregister.items()):
            lines.append(f"{ident} ({reason})" if reason else str(ident))
    else:
        lines.append("No packages would be unregistered.")
    lines.append("")

    if plan.tasks:
        lines.append("Would build:")
        lines.extend(_describe_task(task) for _, task in sorted(plan.tasks.items()))
    else:
        lines.append("Nothing to build.")
    lines.append("")

    if plan.install_exes:
        lines.append("Would install executables:")
        for exe, location in sorted(plan.install_exes.items()):
            lines.append(f"{exe} from {location.value} installation")
    else:
        lines.append("No executables to be installed.")
    return lines


def print_plan(plan: Plan):
    """Print human-readable plan"""
    for line in format_plan(plan):
        print(line)
