import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field

from ..core.errors import ConfigurationError
from ..core.models import BuildOpts, parse_version


@dataclass
class PathsConfig:
    """Tool-wide directories"""
    root: str = "~/.buildtool"
    work_dir: str = ".buildtool-work"
    local_bin: str = "~/.local/bin"
    programs: str = "~/.buildtool/programs"


@dataclass
class ToolchainConfig:
    """Compiler and build library in use"""
    wanted_compiler: str = "ghc-9.4.7"
    actual_compiler: str = "ghc-9.4.7"
    compiler_exe: str = "/usr/bin/ghc"
    compiler_tools_bin: str = "~/.buildtool/compiler-tools"
    cabal_version: str = "3.8.1.0"
    global_db: str = "/usr/lib/ghc/package.conf.d"
    platform: str = "x86_64-linux"


@dataclass
class CollaboratorsConfig:
    """Import strings ('module:attribute') for external collaborators"""
    installed_prober: Optional[str] = None
    plan_constructor: Optional[str] = None
    executor: Optional[str] = None
    package_loader: Optional[str] = None
    pre_fetcher: Optional[str] = None


@dataclass
class GlobalConfig:
    """Global configuration for the build tool"""
    paths: PathsConfig
    toolchain: ToolchainConfig
    build: BuildOpts
    collaborators: CollaboratorsConfig
    allow_locals: bool = True
    allow_newer: bool = False
    extra_package_dbs: List[str] = field(default_factory=list)
    extra_include_dirs: List[str] = field(default_factory=list)
    extra_lib_dirs: List[str] = field(default_factory=list)
    lock_timeout: int = 30
    # package name -> version of packages shipped with the compiler
    global_hints: Optional[Dict[str, str]] = None
    source_path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GlobalConfig':
        """Create GlobalConfig from dictionary"""
        data = dict(data)
        try:
            config = cls(
                paths=PathsConfig(**data.pop('paths', {})),
                toolchain=ToolchainConfig(**data.pop('toolchain', {})),
                build=BuildOpts.from_dict(data.pop('build', {})),
                collaborators=CollaboratorsConfig(**data.pop('collaborators', {})),
                **data
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid global configuration: {e}")

        try:
            parse_version(config.toolchain.cabal_version)
        except ValueError as e:
            raise ConfigurationError(f"Invalid toolchain.cabal_version: {e}")
        return config

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'GlobalConfig':
        """Load GlobalConfig from YAML file"""
        path = Path(yaml_path)
        if not path.exists():
            # Return default config if file doesn't exist
            return cls.default()

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(f"Global configuration must be a mapping: {path}")

        config = cls.from_dict(data or {})
        config.source_path = str(path)
        return config

    @classmethod
    def default(cls) -> 'GlobalConfig':
        """Return default configuration"""
        return cls(
            paths=PathsConfig(),
            toolchain=ToolchainConfig(),
            build=BuildOpts(),
            collaborators=CollaboratorsConfig(),
        )


def load_global_config(config_path: Optional[str] = None) -> GlobalConfig:
    """
    Load global configuration from YAML file.
    If no path provided, looks for global_config.yaml in standard locations.
    """
    if config_path:
        return GlobalConfig.from_yaml(config_path)

    # Try standard locations
    search_paths = [
        Path("./global_config.yaml"),
        Path("./config/global_config.yaml"),
        Path("~/.buildtool/global_config.yaml").expanduser(),
        Path("/etc/buildtool/global_config.yaml"),
    ]

    for path in search_paths:
        if path.exists():
            return GlobalConfig.from_yaml(str(path))

    return GlobalConfig.default()
