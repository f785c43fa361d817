"""Row access for the managed backend, expressed with SQLAlchemy Core.

Every public method returns a :class:`BackendResponse`. Database failures are
logged here and handed back as error values; nothing raises past this layer.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from sqlalchemy import Column, MetaData, Table, case, delete, func, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.types import Uuid

from .response import BackendResponse

logger = logging.getLogger(__name__)

Row = dict[str, Any]


@dataclass(frozen=True)
class Embed:
    """Attach selected columns of a referenced row under the referenced table's name."""

    table: str
    foreign_key: str
    columns: tuple[str, ...]


class _InvalidRequest(ValueError):
    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


def _embed_prefix(embed: Embed) -> str:
    return f"__{embed.table}__"


def _embed_pk_label(embed: Embed) -> str:
    return f"__{embed.table}_pk"


def _nest(row: Row, embed: Embed) -> Row:
    prefix = _embed_prefix(embed)
    nested = {key[len(prefix):]: row.pop(key) for key in list(row) if key.startswith(prefix)}
    target_pk = row.pop(_embed_pk_label(embed), None)
    row[embed.table] = nested if target_pk is not None else None
    return row


def _failure_from(exc: SQLAlchemyError) -> BackendResponse[Any]:
    if isinstance(exc, IntegrityError):
        detail = str(getattr(exc, "orig", exc)).lower()
        if "unique" in detail or "duplicate" in detail:
            return BackendResponse.failure(
                "Duplicate key value violates unique constraint", code="unique_violation"
            )
        if "foreign key" in detail:
            return BackendResponse.failure(
                "Insert or update violates foreign key constraint", code="foreign_key_violation"
            )
        return BackendResponse.failure("Integrity constraint violated", code="integrity_error")
    return BackendResponse.failure("Database request failed", code="database_error")


class TableClient:
    """Filter/insert/update/delete access to the backend's tables by name."""

    def __init__(self, engine: Engine, metadata: MetaData) -> None:
        self._engine = engine
        self._metadata = metadata

    # ------------------------------------------------------------------
    # statement helpers
    # ------------------------------------------------------------------
    def _table(self, name: str) -> Table:
        table = self._metadata.tables.get(name)
        if table is None:
            raise _InvalidRequest(f"Relation {name!r} does not exist", "undefined_table")
        return table

    @staticmethod
    def _column(table: Table, name: str) -> Column[Any]:
        if name not in table.c:
            raise _InvalidRequest(f"Column {name!r} does not exist on {table.name!r}", "undefined_column")
        return table.c[name]

    def _coerce(self, table: Table, name: str, value: Any) -> Any:
        column = self._column(table, name)
        if isinstance(column.type, Uuid) and isinstance(value, str):
            try:
                return uuid.UUID(value)
            except ValueError as exc:
                raise _InvalidRequest(f"Invalid UUID for {name!r}", "invalid_input") from exc
        return value

    def _where(self, table: Table, filters: Mapping[str, Any] | None) -> list[Any]:
        clauses = []
        for name, value in (filters or {}).items():
            column = self._column(table, name)
            coerced = self._coerce(table, name, value)
            clauses.append(column.is_(None) if coerced is None else column == coerced)
        return clauses

    def _values(self, table: Table, record: Mapping[str, Any]) -> dict[str, Any]:
        return {name: self._coerce(table, name, value) for name, value in record.items()}

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------
    def select(
        self,
        table_name: str,
        *,
        columns: Sequence[str] | None = None,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        embed: Embed | None = None,
        limit: int | None = None,
    ) -> BackendResponse[list[Row]]:
        """Return matching rows as dictionaries."""

        try:
            table = self._table(table_name)
            selected = [self._column(table, name) for name in columns] if columns else list(table.c)
            stmt = select(*selected)
            if embed is not None:
                target = self._table(embed.table)
                foreign_key = self._column(table, embed.foreign_key)
                target_pk = next(iter(target.primary_key.columns))
                prefix = _embed_prefix(embed)
                stmt = stmt.add_columns(
                    target_pk.label(_embed_pk_label(embed)),
                    *(self._column(target, name).label(f"{prefix}{name}") for name in embed.columns),
                ).select_from(table.outerjoin(target, foreign_key == target_pk))
            where = self._where(table, filters)
            if where:
                stmt = stmt.where(*where)
            if order_by:
                ordering = self._column(table, order_by)
                stmt = stmt.order_by(ordering.desc() if descending else ordering.asc())
            if limit is not None:
                stmt = stmt.limit(limit)
        except _InvalidRequest as exc:
            return BackendResponse.failure(str(exc), code=exc.code)

        try:
            with self._engine.connect() as conn:
                rows = [dict(row) for row in conn.execute(stmt).mappings()]
        except SQLAlchemyError as exc:
            logger.exception("Select on %s failed", table_name)
            return _failure_from(exc)

        if embed is not None:
            rows = [_nest(row, embed) for row in rows]
        return BackendResponse.success(rows)

    def select_one(
        self,
        table_name: str,
        *,
        filters: Mapping[str, Any],
        columns: Sequence[str] | None = None,
        embed: Embed | None = None,
    ) -> BackendResponse[Row]:
        """Return exactly one row; zero or several matches are errors."""

        result = self.select(table_name, columns=columns, filters=filters, embed=embed, limit=2)
        if result.error is not None:
            return BackendResponse(error=result.error)
        rows = result.data or []
        if not rows:
            return BackendResponse.failure("No rows returned for single-row request", code="not_found")
        if len(rows) > 1:
            return BackendResponse.failure("Multiple rows returned for single-row request", code="multiple_rows")
        return BackendResponse.success(rows[0])

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------
    def insert(self, table_name: str, record: Mapping[str, Any]) -> BackendResponse[Row]:
        """Insert one row and return it as stored."""

        try:
            table = self._table(table_name)
            values = self._values(table, record)
        except _InvalidRequest as exc:
            return BackendResponse.failure(str(exc), code=exc.code)

        stmt = insert(table).values(**values).returning(*table.c)
        try:
            with self._engine.begin() as conn:
                row = dict(conn.execute(stmt).mappings().one())
        except SQLAlchemyError as exc:
            logger.warning("Insert into %s failed: %s", table_name, exc.__class__.__name__)
            return _failure_from(exc)
        return BackendResponse.success(row)

    def update(
        self,
        table_name: str,
        patch: Mapping[str, Any],
        *,
        filters: Mapping[str, Any],
    ) -> BackendResponse[list[Row]]:
        """Apply ``patch`` to every row matching ``filters``; returns the updated rows."""

        if not filters:
            return BackendResponse.failure("Refusing to update without a filter", code="missing_filter")
        if not patch:
            return BackendResponse.failure("Nothing to update", code="empty_patch")
        try:
            table = self._table(table_name)
            where = self._where(table, filters)
            values = self._values(table, patch)
        except _InvalidRequest as exc:
            return BackendResponse.failure(str(exc), code=exc.code)

        stmt = update(table).where(*where).values(**values).returning(*table.c)
        try:
            with self._engine.begin() as conn:
                rows = [dict(row) for row in conn.execute(stmt).mappings()]
        except SQLAlchemyError as exc:
            logger.warning("Update on %s failed: %s", table_name, exc.__class__.__name__)
            return _failure_from(exc)
        return BackendResponse.success(rows)

    def increment(
        self,
        table_name: str,
        column_name: str,
        delta: int,
        *,
        filters: Mapping[str, Any],
        floor: int | None = 0,
    ) -> BackendResponse[int]:
        """Atomically add ``delta`` to a counter column and return the stored value.

        NULL counts as zero. When ``floor`` is set the stored value never drops below it.
        """

        if not filters:
            return BackendResponse.failure("Refusing to update without a filter", code="missing_filter")
        try:
            table = self._table(table_name)
            column = self._column(table, column_name)
            where = self._where(table, filters)
        except _InvalidRequest as exc:
            return BackendResponse.failure(str(exc), code=exc.code)

        current = func.coalesce(column, 0) + delta
        new_value = case((current < floor, floor), else_=current) if floor is not None else current
        values: dict[str, Any] = {column_name: new_value}
        # Counter writes leave the edit timestamp alone.
        if "updated_at" in table.c and column_name != "updated_at":
            values["updated_at"] = table.c.updated_at

        stmt = update(table).where(*where).values(values).returning(column)
        try:
            with self._engine.begin() as conn:
                stored = conn.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            logger.warning("Increment of %s.%s failed: %s", table_name, column_name, exc.__class__.__name__)
            return _failure_from(exc)

        if not stored:
            return BackendResponse.failure("No rows matched the filter", code="not_found")
        return BackendResponse.success(int(stored[0] or 0))

    def delete(self, table_name: str, *, filters: Mapping[str, Any]) -> BackendResponse[int]:
        """Delete rows matching ``filters``; returns how many were removed."""

        if not filters:
            return BackendResponse.failure("Refusing to delete without a filter", code="missing_filter")
        try:
            table = self._table(table_name)
            where = self._where(table, filters)
        except _InvalidRequest as exc:
            return BackendResponse.failure(str(exc), code=exc.code)

        stmt = delete(table).where(*where)
        try:
            with self._engine.begin() as conn:
                removed = conn.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            logger.warning("Delete on %s failed: %s", table_name, exc.__class__.__name__)
            return _failure_from(exc)
        return BackendResponse.success(int(removed or 0))


__all__ = ["Embed", "Row", "TableClient"]
