"""
Core data models for the build orchestration layer.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from .enums import ComponentKind, TaskLocation, TaskTypeKind


Version = Tuple[int, ...]


def parse_version(text: Any) -> Version:
    """Parse dotted version text such as '1.22.0' into a tuple of ints"""
    if isinstance(text, tuple):
        return text
    if isinstance(text, float):
        # YAML reads an unquoted 0.10 as the float 0.1
        raise ValueError(f"Invalid version: {text!r} (quote versions in YAML, e.g. '0.10')")
    parts = str(text).strip().split('.')
    try:
        version = tuple(int(part) for part in parts)
    except ValueError:
        raise ValueError(f"Invalid version: {text!r}")
    if any(part < 0 for part in version):
        raise ValueError(f"Invalid version: {text!r}")
    return version


def version_string(version: Version) -> str:
    return '.'.join(str(part) for part in version)


@dataclass(frozen=True, order=True)
class PackageIdentifier:
    """Package name plus version"""
    name: str
    version: Version

    def __str__(self) -> str:
        return f"{self.name}-{version_string(self.version)}"

    @classmethod
    def parse(cls, text: str) -> 'PackageIdentifier':
        """Parse 'name-1.2.3'. Package names may themselves contain dashes."""
        name, sep, version = text.rpartition('-')
        if not sep or not name:
            raise ValueError(f"Invalid package identifier: {text!r}")
        return cls(name=name, version=parse_version(version))


@dataclass(frozen=True, order=True)
class NamedComponent:
    """A component of a package, e.g. exe:foo"""
    kind: ComponentKind
    name: str = ""

    def __str__(self) -> str:
        if self.kind == ComponentKind.LIBRARY:
            return self.kind.value
        return f"{self.kind.value}:{self.name}"

    @classmethod
    def parse(cls, text: str) -> 'NamedComponent':
        kind, _, name = text.partition(':')
        try:
            component_kind = ComponentKind(kind)
        except ValueError:
            raise ValueError(f"Unknown component kind in {text!r}")
        if component_kind != ComponentKind.LIBRARY and not name:
            raise ValueError(f"Component {text!r} needs a name")
        return cls(kind=component_kind, name=name)


@dataclass(frozen=True)
class Package:
    """Resolved package description"""
    name: str
    version: Version
    executables: FrozenSet[str] = frozenset()
    has_library: bool = True

    @property
    def identifier(self) -> PackageIdentifier:
        return PackageIdentifier(self.name, self.version)


@dataclass(frozen=True)
class LocalPackage:
    """A package that is part of the project being built"""
    package: Package
    cabal_file: Path
    components: FrozenSet[NamedComponent] = frozenset()
    unbuildable: FrozenSet[NamedComponent] = frozenset()
    files: FrozenSet[Path] = frozenset()
    wanted: bool = True

    @property
    def name(self) -> str:
        return self.package.name

    @property
    def directory(self) -> Path:
        return self.cabal_file.parent

    def exe_components(self) -> Set[str]:
        """Names of executables selected for building"""
        return {
            component.name
            for component in self.components
            if component.kind == ComponentKind.EXECUTABLE
        }


@dataclass(frozen=True)
class TaskType:
    """
    Tagged union describing where a task's sources come from.

    FILE_PATH carries the LocalPackage being built, IMMUTABLE carries the
    descriptor of the fetched location.
    """
    kind: TaskTypeKind
    local_package: Optional[LocalPackage] = None
    location: Optional[str] = None

    def __post_init__(self):
        if self.kind == TaskTypeKind.FILE_PATH and self.local_package is None:
            raise ValueError("File path task type requires a local package")
        if self.kind == TaskTypeKind.IMMUTABLE and self.location is None:
            raise ValueError("Immutable task type requires a location")

    @classmethod
    def from_file_path(cls, local_package: LocalPackage) -> 'TaskType':
        return cls(kind=TaskTypeKind.FILE_PATH, local_package=local_package)

    @classmethod
    def from_immutable(cls, location: str) -> 'TaskType':
        return cls(kind=TaskTypeKind.IMMUTABLE, location=location)

    @property
    def is_file_path(self) -> bool:
        return self.kind == TaskTypeKind.FILE_PATH


@dataclass(frozen=True)
class Task:
    """One unit of build work"""
    provides: PackageIdentifier
    task_type: TaskType
    location: TaskLocation
    dependencies: FrozenSet[PackageIdentifier] = frozenset()
    build_haddocks: bool = False


@dataclass
class Plan:
    """All of the build work needed to satisfy the requested targets"""
    tasks: Dict[PackageIdentifier, Task] = field(default_factory=dict)
    # package -> reason
    unregister: Dict[PackageIdentifier, str] = field(default_factory=dict)
    # executable name -> tree it is installed from
    install_exes: Dict[str, TaskLocation] = field(default_factory=dict)

    def __post_init__(self):
        for ident, task in self.tasks.items():
            if task.provides != ident:
                raise ValueError(
                    f"Plan entry {ident} holds a task for {task.provides}"
                )

    @classmethod
    def from_tasks(cls, tasks: List[Task], **kwargs) -> 'Plan':
        return cls(tasks={task.provides: task for task in tasks}, **kwargs)


@dataclass(frozen=True)
class BuildOpts:
    """Build options coming from configuration"""
    lib_profile: bool = False
    exe_profile: bool = False
    lib_strip: bool = True
    exe_strip: bool = True
    haddock: bool = False
    haddock_deps: Optional[bool] = None
    split_objs: bool = False
    pre_fetch: bool = False

    @property
    def profiling(self) -> bool:
        return self.lib_profile or self.exe_profile

    @property
    def symbols(self) -> bool:
        return not (self.lib_strip or self.exe_strip)

    def should_haddock_deps(self) -> bool:
        """Haddock dependencies defaults to the haddock setting"""
        if self.haddock_deps is None:
            return self.haddock
        return self.haddock_deps

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BuildOpts':
        return cls(**data)


@dataclass(frozen=True)
class BuildOptsCLI:
    """Build options coming from the command line"""
    targets: Tuple[str, ...] = ()
    dry_run: bool = False
    initial_build_steps: bool = False
    flags: Dict[str, Dict[str, bool]] = field(default_factory=dict)
    ghc_options: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GetInstalledOpts:
    """Options passed to the installed package prober"""
    profiling: bool
    haddock: bool
    symbols: bool


@dataclass
class InstalledResult:
    """What the installed package prober found"""
    installed_map: Dict[str, Any] = field(default_factory=dict)
    global_dumps: List[Any] = field(default_factory=list)
    snapshot_dumps: List[Any] = field(default_factory=list)
    local_dumps: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class DependencyPackage:
    """A non-project package in the source map"""
    identifier: PackageIdentifier
    location: str
    from_local_dir: bool = False


@dataclass
class SourceMap:
    """Packages known to this build, keyed by package name"""
    targets: Tuple[str, ...] = ()
    project: Dict[str, LocalPackage] = field(default_factory=dict)
    deps: Dict[str, DependencyPackage] = field(default_factory=dict)

    def to_install_map(self) -> Dict[str, Tuple[TaskLocation, Version]]:
        """
        Where each known package would be installed.

        Project packages and dependencies living in a local directory go to the
        local tree, everything else to the snapshot.
        """
        install_map = {}
        for name, dep in self.deps.items():
            location = TaskLocation.LOCAL if dep.from_local_dir else TaskLocation.SNAPSHOT
            install_map[name] = (location, dep.identifier.version)
        for name, local in self.project.items():
            install_map[name] = (TaskLocation.LOCAL, local.package.version)
        return install_map
