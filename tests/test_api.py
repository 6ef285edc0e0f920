"""Test the FastAPI endpoints."""
import asyncio
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from api import app as app_module
from api.app import app


FIRST_EXAMPLE = "#######\n#.G...#\n#...EG#\n#.#.#G#\n#..G#E#\n#.....#\n#######\n"


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    await app_module.shutdown()


async def wait_until_finished(ac: AsyncClient, attempts: int = 500) -> dict:
    for _ in range(attempts):
        data = (await ac.get("/battle/local/state")).json()
        if data["finished"]:
            return data
        await asyncio.sleep(0.01)
    raise AssertionError("battle did not finish")


@pytest.mark.asyncio
async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "Cavern Combat API"


@pytest.mark.asyncio
async def test_state_before_start(client):
    """Battle routes refuse to answer before a battle exists."""
    response = await client.get("/battle/local/state")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_start_battle(client):
    """Test starting a new battle."""
    response = await client.post("/battle/start", json={"map": FIRST_EXAMPLE})
    assert response.status_code == 200
    assert response.json() == {"battle_id": "local"}


@pytest.mark.asyncio
async def test_start_with_bad_map(client):
    response = await client.post("/battle/start", json={"map": "###\n#.\n###"})
    assert response.status_code == 400
    assert "Invalid map" in response.json()["detail"]


@pytest.mark.asyncio
async def test_battle_runs_to_outcome(client):
    """A started battle plays out to the known result."""
    await client.post("/battle/start", json={"map": FIRST_EXAMPLE, "time_compression": 1000})
    data = await wait_until_finished(client)

    assert data["rounds"] == 47
    assert data["outcome"] == 27730
    assert data["winner"] == "G"
    assert len(data["units"]) == 4
    assert data["map"][0] == "#######"


@pytest.mark.asyncio
async def test_get_state_while_running(client):
    await client.post("/battle/start", json={"map": FIRST_EXAMPLE, "time_compression": 1})
    response = await client.get("/battle/local/state")

    assert response.status_code == 200
    data = response.json()
    assert "rounds" in data
    assert "units" in data
    assert data["outcome"] is None or data["finished"]


@pytest.mark.asyncio
async def test_get_events(client):
    """Test retrieving events."""
    await client.post("/battle/start", json={"map": FIRST_EXAMPLE, "time_compression": 1000})
    await wait_until_finished(client)
    response = await client.get("/battle/local/events?since=0&limit=10000")

    assert response.status_code == 200
    data = response.json()
    assert data["next_offset"] == len(data["events"])
    assert data["events"][-1]["kind"] == "CombatEnded"

    kills = (await client.get("/battle/local/events?since=0&limit=10000&kind=UnitKilled")).json()
    assert len(kills["events"]) == 2
    assert all(e["kind"] == "UnitKilled" for e in kills["events"])


@pytest.mark.asyncio
async def test_time_control(client):
    await client.post("/battle/start", json={"map": FIRST_EXAMPLE})
    response = await client.post("/battle/local/time-control?time_compression=5000")
    assert response.json() == {"time_compression": 1000.0}
    response = await client.get("/battle/local/time-control")
    assert response.json() == {"time_compression": 1000.0}


@pytest.mark.asyncio
async def test_boost(client):
    response = await client.post("/battle/boost", json={"map": FIRST_EXAMPLE})
    assert response.status_code == 200
    assert response.json() == {"attack_power": 15, "rounds": 29, "hit_points": 172, "outcome": 4988}


@pytest.mark.asyncio
async def test_boost_without_elves(client):
    response = await client.post("/battle/boost", json={"map": "#G.G#"})
    assert response.status_code == 422
