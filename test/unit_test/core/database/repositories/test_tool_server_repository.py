"""Unit tests for ToolServerRepository."""

from __future__ import annotations

from assistant_army.core.database.entities import ToolServerRecord
from assistant_army.core.database.repositories import ToolServerRepository


async def test_list_for_owner_maps_records(db_session):
    repo = ToolServerRepository(db_session)
    github = await repo.create(
        ToolServerRecord(owner_id=1, name="GitHub", url="https://mcp.example/github", headers={"Authorization": "Bearer x"})
    )
    await repo.create(ToolServerRecord(owner_id=2, name="Other", url="https://mcp.example/other"))
    plain = await repo.create(ToolServerRecord(owner_id=1, name="Docs", url="https://mcp.example/docs"))

    servers = await repo.list_for_owner(1)

    assert [s.id for s in servers] == [github.id, plain.id]
    assert servers[0].label == "GitHub"
    assert servers[0].headers == {"Authorization": "Bearer x"}
    assert servers[1].headers == {}


async def test_list_for_owner_without_servers(db_session):
    assert await ToolServerRepository(db_session).list_for_owner(99) == []
