"""End-to-end tests against the local SQLite connector."""

import math

import pytest
import pytest_asyncio

from kwildb_query import Builder, ExecutionError, SqliteConnector


@pytest_asyncio.fixture
async def db(tmp_path):
    db = Builder("k")
    db.connect({"protocol": "sqlite", "host": str(tmp_path / "data" / "test.db")})
    await db.create_table("people", {"id": "INTEGER PRIMARY KEY", "name": "TEXT", "age": "INTEGER"})
    await db.table("people").insert(
        [
            {"id": 1, "name": "ada", "age": 36},
            {"id": 2, "name": "bob", "age": 17},
            {"id": 3, "name": "cy", "age": None},
        ]
    )
    return db


def test_translate():
    assert SqliteConnector.translate("UPDATE t SET a=$1 WHERE id = $2") == "UPDATE t SET a=?1 WHERE id = ?2"
    assert SqliteConnector.translate("TRUNCATE t") == "DELETE FROM t"
    assert SqliteConnector.translate("SELECT '$1', a FROM t WHERE b = $1") == "SELECT '$1', a FROM t WHERE b = ?1"
    assert SqliteConnector.translate("SELECT 'it''s $2' WHERE \"$3\" = $1") == "SELECT 'it''s $2' WHERE \"$3\" = ?1"


@pytest.mark.asyncio
async def test_get_and_filters(db):
    rows = await db.table("people").where("age", ">", 18).get()
    assert rows == [{"id": 1, "name": "ada", "age": 36}]

    rows = await db.table("people").select(["name"]).where_in("id", [1, 2]).order_by("id", "desc").get()
    assert rows == [{"name": "bob"}, {"name": "ada"}]

    assert await db.table("people").where_null("age").first() == {"id": 3, "name": "cy", "age": None}
    assert await db.table("people").where("name", "like", "b%").count() == 1


@pytest.mark.asyncio
async def test_update_then_find(db):
    result = await db.table("people").where("id", "=", 2).update({"age": 18})
    assert result == {"affected_rows": 1}
    assert (await db.table("people").find(2))["age"] == 18
    assert await db.table("people").find(99) is None


@pytest.mark.asyncio
async def test_aggregates(db):
    people = db.table("people").where_between("age", [10, 40])
    assert await people.count() == 2
    assert await db.table("people").max("age") == 36.0
    assert await db.table("people").avg("age") == 26.5
    assert math.isnan(await db.table("people").where_null("age").sum("age"))


@pytest.mark.asyncio
async def test_delete_and_truncate(db):
    assert await db.table("people").where("id", "=", 1).delete() == {"affected_rows": 1}
    await db.table("people").truncate()
    assert await db.table("people").count() == 0


@pytest.mark.asyncio
async def test_errors_become_execution_errors(db):
    with pytest.raises(ExecutionError, match="no such table"):
        await db.table("missing").get()


@pytest.mark.asyncio
async def test_moat_is_zero(db):
    assert await db.get_moat_funding() == 0
    assert await db.get_moat_debit() == 0
