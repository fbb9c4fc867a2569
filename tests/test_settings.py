import logging

from task_store.db import SQLiteRepository
from task_store.logging_config import setup_logging
from task_store.repositories import InMemoryRepository, get_repository
from task_store.settings import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PERSISTENCE_BACKEND", "SQLITE_DB_PATH", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        assert get_settings() == Settings(
            persistence_backend="memory", sqlite_db_path="./data/tasks.db", log_level="INFO"
        )

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PERSISTENCE_BACKEND", " SQLite ")
        monkeypatch.setenv("SQLITE_DB_PATH", str(tmp_path / "t.db"))
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = get_settings()
        assert settings.persistence_backend == "sqlite"
        assert settings.sqlite_db_path == str(tmp_path / "t.db")
        assert settings.log_level == "DEBUG"

    def test_unsupported_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "postgres")
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        settings = get_settings()
        assert settings.persistence_backend == "memory"
        assert settings.log_level == "INFO"

    def test_empty_values_use_defaults(self, monkeypatch):
        monkeypatch.setenv("SQLITE_DB_PATH", "")
        assert get_settings().sqlite_db_path == "./data/tasks.db"


class TestGetRepository:
    def test_memory_backend(self):
        repo = get_repository(Settings(persistence_backend="memory"))
        assert isinstance(repo, InMemoryRepository)

    def test_sqlite_backend(self, tmp_path):
        path = tmp_path / "db" / "tasks.db"
        repo = get_repository(Settings(persistence_backend="sqlite", sqlite_db_path=str(path)))
        assert isinstance(repo, SQLiteRepository)
        assert path.exists()

    def test_reads_environment_when_no_settings_given(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
        monkeypatch.setenv("SQLITE_DB_PATH", str(tmp_path / "env.db"))
        assert isinstance(get_repository(), SQLiteRepository)

    def test_each_call_returns_a_new_repository(self):
        settings = Settings()
        assert get_repository(settings) is not get_repository(settings)


class TestSetupLogging:
    def test_uses_level_from_settings(self, monkeypatch, clean_task_store_logger):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        logger = setup_logging()
        assert logger is clean_task_store_logger
        assert logger.level == logging.WARNING

    def test_is_idempotent(self, clean_task_store_logger):
        before = len(clean_task_store_logger.handlers)
        setup_logging(logging.DEBUG)
        setup_logging("INFO")
        assert len(clean_task_store_logger.handlers) == before + 1
        assert clean_task_store_logger.level == logging.INFO

    def test_leaves_root_logger_alone(self, clean_task_store_logger):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        setup_logging(logging.DEBUG)
        assert root.handlers == handlers
        assert root.level == level

    def test_unknown_level_name_falls_back_to_info(self, clean_task_store_logger):
        logger = setup_logging("chatty")
        assert logger.level == logging.INFO

    def test_level_names_are_case_insensitive(self, clean_task_store_logger):
        assert setup_logging(" debug ").level == logging.DEBUG


class TestPackageExports:
    def test_backends_and_logging_are_exported(self, tmp_path, clean_task_store_logger):
        import task_store

        repo = task_store.SQLiteRepository(str(tmp_path / "exported.db"))
        assert isinstance(repo, task_store.Repository)
        assert task_store.setup_logging(logging.WARNING) is clean_task_store_logger
        assert {"SQLiteRepository", "setup_logging"} <= set(task_store.__all__)
