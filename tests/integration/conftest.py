import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from media_pipeline.config.settings import Settings
from media_pipeline.database.connection import close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "practice_test")
    return Settings()


def _choose_existing_user_id(db_conn: psycopg.Connection[Any]) -> str:
    with db_conn.cursor() as cur:
        cur.execute("SELECT id FROM users ORDER BY created_at LIMIT 1")
        row = cur.fetchone()
    if row is None:
        pytest.skip("No users rows in DB for integration test setup")
    return str(row[0])


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute("SELECT 1")
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to a database with the practice_sessions schema"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup() -> Generator[list[str], None, None]:
    session_ids: list[str] = []
    yield session_ids
    if not session_ids:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for session_id in session_ids:
                cur.execute("DELETE FROM practice_sessions WHERE id = %s", (session_id,))
        conn.commit()


@pytest.fixture
def seed_session(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[str],
) -> tuple[str, str]:
    user_id = _choose_existing_user_id(db_conn)
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO practice_sessions (user_id, date, duration, mood)
            VALUES (%s, CURRENT_DATE, %s, %s)
            RETURNING id
            """,
            (user_id, 30, "good"),
        )
        row = cur.fetchone()
        assert row is not None
        session_id = str(row[0])
    db_conn.commit()
    integration_cleanup.append(session_id)
    return (session_id, user_id)
