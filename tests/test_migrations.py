"""Alembic migration tests."""

from pathlib import Path

from sqlalchemy import create_engine, inspect, text

from alembic import command
from alembic.config import Config

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"


def _config(url: str) -> Config:
    config = Config()
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    config.set_main_option("sqlalchemy.url", url)
    return config


def test_migrations_upgrade_and_downgrade_on_sqlite(tmp_path):
    """Test the migrations run on SQLite and fill in timestamps."""
    url = f"sqlite:///{tmp_path / 'migrations.db'}"
    config = _config(url)

    command.upgrade(config, "head")

    engine = create_engine(url)
    tables = set(inspect(engine).get_table_names())
    assert {"users", "personal_access_tokens", "projects"} <= tables

    with engine.begin() as conn:
        conn.execute(
            text(
                "INSERT INTO users (name, email, username, password_hash) "
                "VALUES ('Ada', 'ada@example.com', 'ada', 'x')"
            )
        )
        created_at = conn.execute(text("SELECT created_at FROM users")).scalar_one()
    assert created_at is not None

    command.downgrade(config, "base")
    assert "users" not in inspect(engine).get_table_names()
    engine.dispose()
