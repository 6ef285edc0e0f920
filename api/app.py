import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional
from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from combat.config import DEFAULT_CONFIG
from combat.engine import Combat, find_minimal_boost
from combat.errors import MapParseError, NoSolutionError
from combat.model import Faction
from runtime.runner import RoundRunner
from .schemas import BoostRequest, BoostResponse, EventsResponse, StartRequest, StateResponse, UnitOut

logger = logging.getLogger(__name__)

runner: RoundRunner | None = None

async def shutdown():
    """Stop the running battle, if any."""
    global runner
    if runner:
        await runner.stop()
        runner = None

@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    await shutdown()

app = FastAPI(title="Cavern Combat API", lifespan=lifespan)

# Enable CORS for development (React runs on different port)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:5174", "http://localhost:5175"],  # Vite dev server
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def _require_runner() -> RoundRunner:
    if not runner:
        raise HTTPException(400, "Battle not started")
    return runner

@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Cavern Combat API",
        "docs": "/docs",
        "version": "1.0"
    }

@app.post("/battle/start")
async def start_battle(req: StartRequest):
    """Parse a map and start playing it out round by round."""
    overrides: Dict[Faction, int] = {}
    if req.elf_attack_power is not None:
        overrides[Faction.ELF] = req.elf_attack_power
    if req.goblin_attack_power is not None:
        overrides[Faction.GOBLIN] = req.goblin_attack_power
    try:
        combat = Combat.from_text(req.map, DEFAULT_CONFIG, overrides)
    except MapParseError as e:
        raise HTTPException(400, f"Invalid map: {e}")

    await shutdown()
    global runner
    runner = RoundRunner(combat, round_ms=500, time_compression=req.time_compression)
    await runner.start()
    return {"battle_id": combat.battle_id}

@app.get("/battle/local/state", response_model=StateResponse)
async def get_state():
    """Get current battle state snapshot."""
    r = _require_runner()
    s = await r.snapshot()
    winner: Optional[Faction] = r.combat.units.winner if s.finished else None
    return StateResponse(
        battle_id=s.battle_id,
        rounds=s.rounds,
        finished=s.finished,
        outcome=r.combat.outcome,
        winner=winner.value if winner else None,
        error=str(r.error) if r.error else None,
        map=r.combat.units.battlefield.render(s.units).split("\n"),
        units={
            u.id: UnitOut(
                id=u.id,
                faction=u.faction.value,
                pos=[u.pos.x, u.pos.y],
                hp=u.hp,
                attack_power=u.attack_power,
            ) for u in s.units
        },
    )

@app.get("/battle/local/events")
async def get_events(since: int = 0, limit: int = 500, kind: Optional[str] = None):
    """Get events since offset."""
    r = _require_runner()
    evts, next_offset = r.events.since(since, limit, kind)
    return EventsResponse(
        next_offset=next_offset,
        events=[{"kind": e.kind, "round": e.round, "data": e.data} for e in evts]
    )

@app.post("/battle/local/time-control")
async def set_time_control(time_compression: float):
    """Set simulation time compression (1.0 = real-time, higher = faster)."""
    r = _require_runner()
    r.set_time_compression(time_compression)
    return {"time_compression": r.time_compression}

@app.get("/battle/local/time-control")
async def get_time_control():
    """Get current time compression setting."""
    r = _require_runner()
    return {"time_compression": r.time_compression}

@app.post("/battle/boost", response_model=BoostResponse)
async def boost(req: BoostRequest):
    """Find the smallest elf attack power that wins without elf losses."""
    try:
        found = await run_in_threadpool(find_minimal_boost, req.map, DEFAULT_CONFIG)
    except MapParseError as e:
        raise HTTPException(400, f"Invalid map: {e}")
    except NoSolutionError as e:
        raise HTTPException(422, str(e))
    return BoostResponse(
        attack_power=found.attack_power,
        rounds=found.result.rounds,
        hit_points=found.result.hit_points,
        outcome=found.result.outcome,
    )
