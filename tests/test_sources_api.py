"""Tests for the public /v1/sources endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from syncapi.models.job import Job, JobConfigType, JobStatus
from syncapi.models.source import Connection

BASE = "/api/public/v1/sources"


async def _create(client: AsyncClient, seeded: dict, **overrides) -> dict:
    body = {
        "name": "orders-db",
        "workspaceId": seeded["workspace_id"],
        "definitionId": seeded["definition_id"],
        "configuration": {"host": "db.internal", "port": 5432, "ssl": {"mode": "require"}},
    }
    body.update(overrides)
    response = await client.post(BASE, json=body)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_and_get_source(client: AsyncClient, seeded):
    created = await _create(client, seeded)
    assert created["name"] == "orders-db"
    assert created["sourceType"] == "postgres"
    assert created["definitionId"] == seeded["definition_id"]
    assert created["configuration"]["host"] == "db.internal"

    response = await client.get(f"{BASE}/{created['sourceId']}")
    assert response.status_code == 200
    assert response.json()["sourceId"] == created["sourceId"]


@pytest.mark.asyncio
async def test_create_resolves_definition_from_source_type(client: AsyncClient, seeded):
    created = await _create(
        client,
        seeded,
        definitionId=None,
        configuration={"sourceType": "postgres", "host": "h"},
    )
    assert created["definitionId"] == seeded["definition_id"]


@pytest.mark.asyncio
async def test_create_with_unknown_source_type_is_bad_request(client: AsyncClient, seeded):
    response = await client.post(
        BASE,
        json={
            "name": "x",
            "workspaceId": seeded["workspace_id"],
            "configuration": {"sourceType": "nope", "host": "h"},
        },
    )
    assert response.status_code == 400
    assert response.headers["content-type"].startswith("application/problem+json")


@pytest.mark.asyncio
async def test_create_with_invalid_configuration_is_bad_request(client: AsyncClient, seeded):
    response = await client.post(
        BASE,
        json={
            "name": "x",
            "workspaceId": seeded["workspace_id"],
            "definitionId": seeded["definition_id"],
            "configuration": {"port": 5432},
        },
    )
    assert response.status_code == 400
    assert "host" in response.json()["detail"]


@pytest.mark.asyncio
async def test_get_unknown_source_is_not_found(client: AsyncClient, seeded):
    response = await client.get(f"{BASE}/does-not-exist")
    assert response.status_code == 404
    data = response.json()
    assert data["title"] == "resource-not-found"
    assert data["data"] == {"resourceId": "does-not-exist"}


@pytest.mark.asyncio
async def test_put_replaces_configuration(client: AsyncClient, seeded):
    created = await _create(client, seeded)
    response = await client.put(
        f"{BASE}/{created['sourceId']}",
        json={"name": "renamed", "configuration": {"host": "new-host"}},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "renamed"
    assert data["configuration"] == {"host": "new-host"}


@pytest.mark.asyncio
async def test_patch_merges_configuration(client: AsyncClient, seeded):
    created = await _create(client, seeded)
    response = await client.patch(
        f"{BASE}/{created['sourceId']}",
        json={"configuration": {"port": 6543, "ssl": {"ca": "pem"}}},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "orders-db"
    assert data["configuration"] == {
        "host": "db.internal",
        "port": 6543,
        "ssl": {"mode": "require", "ca": "pem"},
    }


@pytest.mark.asyncio
async def test_delete_source_deprecates_connections(client: AsyncClient, seeded, session_factory):
    created = await _create(client, seeded)
    async with session_factory() as db:
        db.add(Connection(source_id=created["sourceId"], name="orders -> warehouse"))
        await db.commit()

    response = await client.delete(f"{BASE}/{created['sourceId']}")
    assert response.status_code == 204

    async with session_factory() as db:
        connection = (await db.execute(select(Connection))).scalar_one()
        assert connection.status == "deprecated"

    # Deleted sources cannot be updated
    response = await client.put(
        f"{BASE}/{created['sourceId']}",
        json={"name": "again", "configuration": {"host": "h"}},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_list_defaults_to_current_user_workspaces(client: AsyncClient, seeded):
    await _create(client, seeded, name="a")
    await _create(client, seeded, name="b", workspaceId=seeded["other_workspace_id"])

    response = await client.get(BASE)
    assert response.status_code == 200
    names = [s["name"] for s in response.json()["data"]]
    assert names == ["a"]

    response = await client.get(BASE, params={"workspaceIds": seeded["other_workspace_id"]})
    assert [s["name"] for s in response.json()["data"]] == ["b"]


@pytest.mark.asyncio
async def test_list_pagination_and_deleted(client: AsyncClient, seeded):
    created = [await _create(client, seeded, name=f"s{i}") for i in range(3)]
    await client.delete(f"{BASE}/{created[0]['sourceId']}")

    response = await client.get(BASE, params={"limit": 1})
    data = response.json()
    assert [s["name"] for s in data["data"]] == ["s1"]
    assert "offset=1" in data["next"]
    assert data["previous"] is None

    response = await client.get(BASE, params={"limit": 2, "includeDeleted": "true"})
    data = response.json()
    assert [s["name"] for s in data["data"]] == ["s0", "s1"]

    response = await client.get(BASE, params={"limit": 2, "offset": 2, "includeDeleted": "true"})
    data = response.json()
    assert [s["name"] for s in data["data"]] == ["s2"]
    assert data["next"] is None
    assert "offset=0" in data["previous"]


@pytest.mark.asyncio
async def test_list_rejects_out_of_range_limit(client: AsyncClient, seeded):
    response = await client.get(BASE, params={"limit": 101})
    assert response.status_code == 422
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["title"] == "unprocessable-entity"
    assert body["data"]["errors"][0]["loc"] == ["query", "limit"]


@pytest.mark.asyncio
async def test_internal_api_keeps_default_validation_body(client: AsyncClient, seeded):
    response = await client.post("/api/v1/jobs/list", json={"config_id": "c1"})
    assert response.status_code == 422
    assert "detail" in response.json()


@pytest.mark.asyncio
async def test_schema_discovery_uses_cache(client: AsyncClient, seeded, session_factory):
    created = await _create(client, seeded)
    url = f"{BASE}/{created['sourceId']}/schema"

    first = await client.get(url)
    assert first.status_code == 200
    body = first.json()
    assert body["job_info"]["succeeded"] is True
    assert [s["stream"]["name"] for s in body["catalog"]["streams"]] == ["orders", "customers"]

    second = await client.get(url)
    assert second.json()["catalog_id"] == body["catalog_id"]

    third = await client.get(url, params={"disableCache": "true"})
    assert third.json()["catalog_id"] != body["catalog_id"]

    async with session_factory() as db:
        jobs = (await db.execute(select(Job))).scalars().all()
        assert len(jobs) == 2
        assert all(j.config_type == JobConfigType.DISCOVER_SCHEMA for j in jobs)
        assert all(j.status == JobStatus.SUCCEEDED for j in jobs)


@pytest.mark.asyncio
async def test_schema_discovery_failure_is_bad_request(client: AsyncClient, seeded):
    created = await _create(
        client, seeded, configuration={"host": "h", "fail_discover": "permission denied"}
    )
    response = await client.get(f"{BASE}/{created['sourceId']}/schema")
    assert response.status_code == 400
    assert response.json()["detail"] == "Something went wrong in the connector. logs:permission denied"


@pytest.mark.asyncio
async def test_initiate_oauth_not_implemented(client: AsyncClient, seeded):
    response = await client.post(
        f"{BASE}/initiateOAuth",
        json={"sourceType": "github", "redirectUrl": "http://x", "workspaceId": seeded["workspace_id"]},
    )
    assert response.status_code == 501
