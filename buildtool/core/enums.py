from enum import Enum


class TaskLocation(str, Enum):
    """Which install tree a task writes to"""
    LOCAL = "local"
    SNAPSHOT = "snapshot"


class TaskTypeKind(str, Enum):
    FILE_PATH = "file_path"
    IMMUTABLE = "immutable"


class ComponentKind(str, Enum):
    LIBRARY = "lib"
    INTERNAL_LIBRARY = "internal-lib"
    EXECUTABLE = "exe"
    TEST_SUITE = "test"
    BENCHMARK = "bench"


class DatabaseTier(str, Enum):
    """Package database tiers, in lookup order"""
    GLOBAL = "global"
    EXTRA = "extra"
    SNAPSHOT = "snapshot"
    LOCAL = "local"
