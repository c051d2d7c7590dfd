"""Database schema DDL, rendered per TreeConfig. All statements use IF NOT EXISTS for idempotency.

No UNIQUE or CHECK (left < right) constraints: SQLite checks them per row,
and shifts pass through states that break both before their transaction
commits.
"""

from nestedset.config import TreeConfig


def quote(identifier: str) -> str:
    """Quote an (already validated) SQL identifier."""
    return f'"{identifier}"'


def schema_sql(config: TreeConfig) -> str:
    table = quote(config.table_name)
    lft = quote(config.left_column)
    rgt = quote(config.right_column)

    group_def = ""
    group_index = ""
    if config.group_column is not None:
        grp = quote(config.group_column)
        group_def = f",\n    {grp} TEXT"
        group_index = (
            f"CREATE INDEX IF NOT EXISTS {quote(f'idx_{config.table_name}_{config.group_column}')}"
            f" ON {table}({grp});\n"
        )

    return f"""
CREATE TABLE IF NOT EXISTS {table} (
    {quote(config.id_column)} INTEGER PRIMARY KEY AUTOINCREMENT,
    {quote(config.name_column)} TEXT NOT NULL,
    {lft} INTEGER NOT NULL,
    {rgt} INTEGER NOT NULL{group_def}
);

CREATE INDEX IF NOT EXISTS {quote(f'idx_{config.table_name}_{config.left_column}')} ON {table}({lft});
CREATE INDEX IF NOT EXISTS {quote(f'idx_{config.table_name}_{config.right_column}')} ON {table}({rgt});
{group_index}"""
