from .droppers import (
    PostgresDropper,
    SqliteDropper,
    TableDropper,
    build_drop_statement,
    get_dropper,
    register_dropper,
)
from .manager import (
    BaseDBManager,
    PostgresManager,
    SqliteManager,
    manager_from_env,
)

__all__ = [
    # Droppers
    "TableDropper",
    "PostgresDropper",
    "SqliteDropper",
    "build_drop_statement",
    "get_dropper",
    "register_dropper",
    # Managers
    "BaseDBManager",
    "PostgresManager",
    "SqliteManager",
    "manager_from_env",
]
