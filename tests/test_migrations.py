"""Alembic revision against the SQLModel tables."""
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect
from sqlmodel import SQLModel

import app.models  # noqa: F401

ROOT = Path(__file__).resolve().parents[1]


def _config(connection) -> Config:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.attributes["connection"] = connection
    return cfg


def test_upgrade_matches_models_and_downgrade_drops_everything(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'migrate.db'}")

    with engine.begin() as conn:
        command.upgrade(_config(conn), "head")
        insp = inspect(conn)
        assert set(SQLModel.metadata.tables) <= set(insp.get_table_names())
        for name, table in SQLModel.metadata.tables.items():
            assert {c["name"] for c in insp.get_columns(name)} == set(table.columns.keys()), name

    with engine.begin() as conn:
        command.downgrade(_config(conn), "base")
        assert set(inspect(conn).get_table_names()) == {"alembic_version"}
    engine.dispose()
