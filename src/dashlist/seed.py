"""
Seed the configured store with a starter todo.

Usage:
    python -m dashlist.seed

The starter todo has the fixed id "1", so running the script again leaves
the existing record untouched.
"""
from __future__ import annotations

import logging
from typing import Optional

from .logging_utils import configure_logging
from .models import TodoEntity
from .repositories import Repository, get_repository
from .settings import get_settings
from .utils import utcnow

logger = logging.getLogger(__name__)

SEED_ID = "1"
SEED_TASK = "Buy a new PC"


# PUBLIC_INTERFACE
def seed(repo: Optional[Repository] = None) -> TodoEntity:
    """Insert the starter todo unless a record with its id already exists, and return it."""
    if repo is None:
        repo = get_repository()
    existing = repo.get(SEED_ID)
    if existing is not None:
        logger.info("Seed todo %s already present", SEED_ID)
        return existing
    created = repo.create(SEED_TASK, utcnow(), todo_id=SEED_ID)
    logger.info("Seeded todo %s", SEED_ID)
    return created


def main() -> None:
    configure_logging(get_settings().log_level)
    todo = seed()
    logger.info("%s", {"newTodo": todo})


if __name__ == "__main__":
    main()
