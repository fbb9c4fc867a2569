import logging

import pytest

from task_store.db import SQLiteRepository
from task_store.repositories import InMemoryRepository, Repository


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path) -> Repository:
    if request.param == "sqlite":
        return SQLiteRepository(str(tmp_path / "data" / "tasks.db"))
    return InMemoryRepository()


@pytest.fixture
def sqlite_path(tmp_path) -> str:
    return str(tmp_path / "tasks.db")


@pytest.fixture
def clean_task_store_logger():
    logger = logging.getLogger("task_store")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)
