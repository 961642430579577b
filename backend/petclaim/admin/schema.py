"""Schema checks and raw SQL application."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.schema import CreateTable

from petclaim.admin.registry import AdminOperationError, NoInput, admin_operation
from petclaim.core.config import get_settings
from petclaim.db.base import Base
from petclaim.db.policies import PUBLIC_DOSE_POLICY_SQL, split_sql_statements

import petclaim.models  # noqa: F401  (populate Base.metadata)

logger = logging.getLogger(__name__)

MANUAL_SQL_INSTRUCTIONS = (
    "DATABASE_DIRECT_URL is not set. Open the database dashboard's SQL editor, "
    "paste the statements below and run them."
)


class ApplySQLInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: Path


class PolicyInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    apply: bool = False


def _live_columns(sync_conn) -> dict[str, set[str]]:
    inspector = inspect(sync_conn)
    return {
        table: {column["name"] for column in inspector.get_columns(table)}
        for table in inspector.get_table_names()
    }


@admin_operation("check-schema")
async def check_schema(session: AsyncSession, params: NoInput) -> dict[str, Any]:
    """Compare live tables with the models and print fixes for any gaps."""
    connection = await session.connection()
    live = await connection.run_sync(_live_columns)
    dialect = connection.dialect

    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    statements: list[str] = []
    for table in Base.metadata.sorted_tables:
        if table.name not in live:
            missing_tables.append(table.name)
            statements.append(str(CreateTable(table).compile(dialect=dialect)).strip())
            continue
        gaps = [column for column in table.columns if column.name not in live[table.name]]
        if gaps:
            missing_columns[table.name] = [column.name for column in gaps]
        for column in gaps:
            column_type = column.type.compile(dialect=dialect)
            statements.append(
                f"ALTER TABLE {table.name} ADD COLUMN {column.name} {column_type}"
            )
    return {
        "ok": not statements,
        "missing_tables": missing_tables,
        "missing_columns": missing_columns,
        "statements": statements,
    }


async def _execute_direct(database_url: str, statements: list[str]) -> None:
    engine = create_async_engine(database_url)
    try:
        async with engine.begin() as conn:
            for statement in statements:
                await conn.exec_driver_sql(statement)
    finally:
        await engine.dispose()


@admin_operation("apply-sql", input_model=ApplySQLInput)
async def apply_sql(session: AsyncSession, params: ApplySQLInput) -> dict[str, Any]:
    """Run a SQL file through the direct database connection."""
    if not params.path.is_file():
        raise AdminOperationError(f"SQL file not found: {params.path}")
    sql = params.path.read_text(encoding="utf-8")
    statements = split_sql_statements(sql)
    if not statements:
        raise AdminOperationError(f"No SQL statements in {params.path}")

    direct_url = get_settings().database_direct_url
    if not direct_url:
        logger.warning("DATABASE_DIRECT_URL not set; printing manual instructions")
        return {
            "applied": False,
            "instructions": MANUAL_SQL_INSTRUCTIONS,
            "sql": sql,
        }

    await _execute_direct(direct_url, statements)
    logger.info("Applied %s statements from %s", len(statements), params.path)
    return {"applied": True, "statements": len(statements), "path": str(params.path)}


@admin_operation("rls-policy", input_model=PolicyInput)
async def rls_policy(session: AsyncSession, params: PolicyInput) -> dict[str, Any]:
    """Print or apply the public read-by-token policy for medication doses."""
    statements = split_sql_statements(PUBLIC_DOSE_POLICY_SQL)
    if not params.apply:
        return {"applied": False, "sql": PUBLIC_DOSE_POLICY_SQL}
    connection = await session.connection()
    if connection.dialect.name != "postgresql":
        raise AdminOperationError("Row-level security policies require PostgreSQL")
    for statement in statements:
        await connection.exec_driver_sql(statement)
    await session.commit()
    logger.info("Applied %s row-level security statements", len(statements))
    return {"applied": True, "statements": len(statements)}
