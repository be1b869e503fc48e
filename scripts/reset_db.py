import logging
import sys
from pathlib import Path

# Make the project root importable when this file is run directly
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from freshdb import get_dropper, manager_from_env


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    manager = manager_from_env()
    print(f"[INFO] Dropping all {manager.dialect} objects...")
    get_dropper(manager).drop_all_tables()
    print("[OK] Database is empty.")


if __name__ == "__main__":
    main()
