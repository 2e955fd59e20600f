"""
Loads the project file describing local packages and dependencies.
"""
import yaml
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from ..core.enums import ComponentKind
from ..core.errors import ConfigurationError
from ..core.models import (
    DependencyPackage, LocalPackage, NamedComponent, Package,
    PackageIdentifier, SourceMap, parse_version
)

logger = logging.getLogger(__name__)


def _require_mapping(entry: Any, kind: str):
    if not isinstance(entry, dict):
        raise ConfigurationError(f"{kind} entry must be a mapping with 'name' and 'version': {entry!r}")


@dataclass
class ProjectConfig:
    """Parsed project file"""
    path: Path
    root: Path
    snapshot: str
    locals: Tuple[LocalPackage, ...] = ()
    dependency_locals: Tuple[LocalPackage, ...] = ()
    dependencies: Dict[str, DependencyPackage] = field(default_factory=dict)

    def source_map(self, targets: Tuple[str, ...] = ()) -> SourceMap:
        """Source map for this project; no targets means every wanted local"""
        if not targets:
            targets = tuple(lp.name for lp in self.locals if lp.wanted)
        return SourceMap(
            targets=targets,
            project={lp.name: lp for lp in self.locals},
            deps=dict(self.dependencies),
        )


class ProjectLoader:
    """Load and validate project files"""

    @staticmethod
    def load_from_yaml(file_path: str) -> ProjectConfig:
        """Load project from YAML file"""
        path = Path(file_path).resolve()
        if not path.exists():
            raise ConfigurationError(f"Project file not found: {path}")

        with open(path, 'r') as file:
            project_dict = yaml.safe_load(file)

        if not isinstance(project_dict, dict):
            raise ConfigurationError(f"Empty or invalid YAML file: {path}")

        return ProjectLoader.load_from_dict(project_dict, path)

    @staticmethod
    def load_from_dict(project_dict: Dict[str, Any], path: Path) -> ProjectConfig:
        """Load project from dictionary; relative paths resolve against the file's directory"""
        root = path.parent
        if 'snapshot' not in project_dict:
            raise ConfigurationError(f"Project file {path} does not name a snapshot")

        locals_ = tuple(
            ProjectLoader._load_local_package(pkg, root)
            for pkg in project_dict.get('packages') or []
        )

        dependency_locals: List[LocalPackage] = []
        dependencies: Dict[str, DependencyPackage] = {}
        for dep in project_dict.get('dependencies') or []:
            _require_mapping(dep, "Dependency")
            if 'path' in dep:
                local = ProjectLoader._load_local_package(dep, root, wanted=False)
                dependency_locals.append(local)
                dependencies[local.name] = DependencyPackage(
                    identifier=local.package.identifier,
                    location=str(local.directory),
                    from_local_dir=True,
                )
            else:
                dependency = ProjectLoader._load_dependency(dep)
                dependencies[dependency.identifier.name] = dependency

        names = [lp.name for lp in locals_]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate local packages: {', '.join(duplicates)}")

        logger.debug(
            f"Loaded project {path}: {len(locals_)} packages, "
            f"{len(dependencies)} dependencies"
        )
        return ProjectConfig(
            path=path,
            root=root,
            snapshot=str(project_dict['snapshot']),
            locals=locals_,
            dependency_locals=tuple(dependency_locals),
            dependencies=dependencies,
        )

    @staticmethod
    def _load_local_package(pkg: Dict[str, Any], root: Path, wanted: bool = True) -> LocalPackage:
        _require_mapping(pkg, "Package")
        try:
            name = pkg['name']
            version = parse_version(pkg['version'])
        except KeyError as e:
            raise ConfigurationError(f"Package entry is missing {e}: {pkg}")
        except ValueError as e:
            raise ConfigurationError(str(e))

        directory = (root / pkg.get('path', name)).resolve()
        cabal_file = directory / pkg.get('cabal_file', f"{name}.cabal")
        executables = frozenset(pkg.get('executables') or [])
        has_library = pkg.get('library', True)
        package = Package(
            name=name,
            version=version,
            executables=executables,
            has_library=has_library,
        )

        try:
            if 'components' in pkg:
                components = frozenset(NamedComponent.parse(c) for c in pkg['components'])
            else:
                # Default: build the library and every executable
                components = frozenset(
                    [NamedComponent(ComponentKind.EXECUTABLE, exe) for exe in executables]
                    + ([NamedComponent(ComponentKind.LIBRARY)] if has_library else [])
                )
            unbuildable = frozenset(
                NamedComponent.parse(c) for c in pkg.get('unbuildable') or []
            )
        except ValueError as e:
            raise ConfigurationError(f"Package {name}: {e}")

        files = frozenset(
            [cabal_file] + [directory / f for f in pkg.get('files') or []]
        )
        return LocalPackage(
            package=package,
            cabal_file=cabal_file,
            components=components,
            unbuildable=unbuildable,
            files=files,
            wanted=pkg.get('wanted', wanted),
        )

    @staticmethod
    def _load_dependency(dep: Dict[str, Any]) -> DependencyPackage:
        try:
            identifier = PackageIdentifier(dep['name'], parse_version(dep['version']))
        except KeyError as e:
            raise ConfigurationError(f"Dependency entry is missing {e}: {dep}")
        except ValueError as e:
            raise ConfigurationError(str(e))
        location = dep.get('location', f"index:{identifier}")
        return DependencyPackage(identifier=identifier, location=location)
