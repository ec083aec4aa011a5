import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from knowledge_base.config.settings import Settings
from knowledge_base.database.connection import close_pool, get_connection, init_pool, init_schema
from knowledge_base.knowledge.service import KnowledgeBaseService, build_service


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "knowledge_base_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        init_schema()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture(autouse=True)
def clean_tables(integration_pool: None) -> Generator[None, None, None]:
    """Empty both tables around every integration test."""

    def truncate() -> None:
        with get_connection() as conn:
            conn.execute("TRUNCATE knowledge_documents, knowledge_base")
            conn.commit()

    truncate()
    yield
    truncate()


@pytest.fixture
def service(
    integration_pool: None,
    test_settings: Settings,
    tmp_path: Path,
) -> KnowledgeBaseService:
    return build_service(test_settings, blob_root=tmp_path)
