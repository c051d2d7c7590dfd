"""Record store for one nested-set table, scoped to the active forest partition.

The only module that assembles SQL text. Templates use ``{table}``, ``{id}``,
``{name}``, ``{lft}``, ``{rgt}`` and ``{grp}`` placeholders, filled with the
quoted identifiers from the TreeConfig.
"""

from contextlib import AbstractAsyncContextManager

import aiosqlite

from nestedset.config import TreeConfig
from nestedset.db.connection import Database
from nestedset.db.schema import quote
from nestedset.models import Node


class NodeTable:
    def __init__(self, db: Database, config: TreeConfig) -> None:
        self._db = db
        self._config = config
        self._names = {
            "table": quote(config.table_name),
            "id": quote(config.id_column),
            "name": quote(config.name_column),
            "lft": quote(config.left_column),
            "rgt": quote(config.right_column),
            "grp": quote(config.group_column) if config.group_column else "NULL",
        }

    @property
    def config(self) -> TreeConfig:
        return self._config

    def transaction(self) -> AbstractAsyncContextManager[None]:
        return self._db.transaction()

    def sql(self, template: str) -> str:
        """Fill identifier placeholders in a SQL template."""
        return template.format(**self._names)

    def partition(self, alias: str | None = None) -> tuple[str, tuple]:
        """The ``AND <group> = ?`` clause for the active tree, or nothing."""
        if not self._config.partitioned:
            return "", ()
        column = self._names["grp"]
        if alias:
            column = f"{alias}.{column}"
        return f" AND {column} = ?", (self._config.group_value,)

    def select_list(self, alias: str | None = None) -> str:
        """Columns aliased to the id, name, lft, rgt, grp keys ``to_node`` reads."""
        p = f"{alias}." if alias else ""
        n = self._names
        grp = f"{p}{n['grp']}" if self._config.partitioned else "NULL"
        return (
            f"{p}{n['id']} AS id, {p}{n['name']} AS name, "
            f"{p}{n['lft']} AS lft, {p}{n['rgt']} AS rgt, {grp} AS grp"
        )

    def _scoped(self, where: str, params: tuple) -> tuple[str, tuple]:
        clause, extra = self.partition()
        return f"WHERE ({self.sql(where or '1 = 1')}){clause}", (*params, *extra)

    # -- Reads --

    async def fetch_all(
        self, where: str = "", params: tuple = (), order_by: str = "{lft} ASC"
    ) -> list[Node]:
        """Rows matching ``where`` in the active tree, as Nodes."""
        scoped, scoped_params = self._scoped(where, params)
        rows = await self._db.fetchall(
            f"SELECT {self.select_list()} FROM {self._names['table']} "
            + scoped
            + " ORDER BY "
            + self.sql(order_by),
            scoped_params,
        )
        return [self.to_node(row) for row in rows]

    async def fetch_one(
        self, where: str, params: tuple = (), order_by: str = "{lft} ASC"
    ) -> Node | None:
        nodes = await self.fetch_all(where, params, order_by)
        return nodes[0] if nodes else None

    async def query(self, template: str, params: tuple = ()) -> list[aiosqlite.Row]:
        """Run a hand-written SELECT. The caller applies ``partition()`` itself."""
        return await self._db.fetchall(self.sql(template), params)

    @staticmethod
    def to_node(row: aiosqlite.Row) -> Node:
        return Node(
            id=row["id"],
            name=row["name"],
            left=row["lft"],
            right=row["rgt"],
            group=row["grp"],
        )

    # -- Writes --

    async def insert(self, name: str, left: int, right: int) -> Node:
        """Insert a row with the given interval, tagged with the active group."""
        if self._config.partitioned:
            cursor = await self._db.execute(
                self.sql("INSERT INTO {table} ({name}, {lft}, {rgt}, {grp}) VALUES (?, ?, ?, ?)"),
                (name, left, right, self._config.group_value),
            )
        else:
            cursor = await self._db.execute(
                self.sql("INSERT INTO {table} ({name}, {lft}, {rgt}) VALUES (?, ?, ?)"),
                (name, left, right),
            )
        assert cursor.lastrowid is not None
        return Node(
            id=cursor.lastrowid,
            name=name,
            left=left,
            right=right,
            group=self._config.group_value,
        )

    async def update(self, assignments: str, where: str, params: tuple = ()) -> int:
        """UPDATE rows in the active tree. Returns the affected row count.

        ``params`` supplies the placeholders of ``assignments`` then ``where``.
        """
        scoped, scoped_params = self._scoped(where, params)
        cursor = await self._db.execute(
            self.sql("UPDATE {table} SET ") + self.sql(assignments) + " " + scoped,
            scoped_params,
        )
        return cursor.rowcount

    async def delete(self, where: str, params: tuple = ()) -> int:
        """DELETE rows in the active tree. Returns the affected row count."""
        scoped, scoped_params = self._scoped(where, params)
        cursor = await self._db.execute(self.sql("DELETE FROM {table} ") + scoped, scoped_params)
        return cursor.rowcount
