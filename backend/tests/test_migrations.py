import importlib.util
from pathlib import Path

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

VERSIONS = Path(__file__).resolve().parents[1] / "alembic" / "versions"


def load_revisions():
    mods = []
    for path in VERSIONS.glob("*.py"):
        spec = importlib.util.spec_from_file_location(path.stem, path)
        mod = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(mod)
        mods.append(mod)

    by_parent = {m.down_revision: m for m in mods}
    chain, parent = [], None
    while parent in by_parent:
        mod = by_parent[parent]
        chain.append(mod)
        parent = mod.revision
    assert len(chain) == len(mods), "revisions do not form a single chain"
    return chain


def upgrade_all(conn):
    ctx = MigrationContext.configure(conn)
    with Operations.context(ctx):
        for mod in load_revisions():
            mod.upgrade()


def test_upgrade_builds_current_schema():
    engine = sa.create_engine("sqlite+pysqlite:///:memory:")
    with engine.begin() as conn:
        upgrade_all(conn)
        insp = sa.inspect(conn)
        assert {"habits", "entries", "public_profiles"} <= set(insp.get_table_names())
        habit_cols = {c["name"] for c in insp.get_columns("habits")}
        assert {"goals", "decimals", "sort_index", "goal_daily", "goal_period"} <= habit_cols


def test_upgrade_is_safe_to_rerun():
    engine = sa.create_engine("sqlite+pysqlite:///:memory:")
    with engine.begin() as conn:
        upgrade_all(conn)
        conn.execute(
            sa.text(
                "INSERT INTO habits (id, user_id, name, goal_daily, goal_period) "
                "VALUES ('h1', 'u1', 'Old habit', 5, 'weekly')"
            )
        )
        upgrade_all(conn)
        row = conn.execute(
            sa.text("SELECT decimals, sort_index, goal_daily, goal_period FROM habits")
        ).one()
    assert (row.decimals, row.sort_index, float(row.goal_daily), row.goal_period) == (0, 0, 5.0, "weekly")
