from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

class StartRequest(BaseModel):
    """Battle start request schema."""
    map: str
    elf_attack_power: Optional[int] = Field(default=None, gt=0)
    goblin_attack_power: Optional[int] = Field(default=None, gt=0)
    time_compression: float = Field(default=30.0, gt=0)

class BoostRequest(BaseModel):
    """Boost search request schema."""
    map: str

class UnitOut(BaseModel):
    id: str
    faction: Literal["G", "E"]
    pos: List[int]  # [x, y]
    hp: int
    attack_power: int

class StateResponse(BaseModel):
    """Battle state response schema."""
    battle_id: str
    rounds: int
    finished: bool
    outcome: Optional[int] = None
    winner: Optional[Literal["G", "E"]] = None
    error: Optional[str] = None
    map: List[str]
    units: Dict[str, UnitOut]

class BoostResponse(BaseModel):
    """Boost search response schema."""
    attack_power: int
    rounds: int
    hit_points: int
    outcome: int

class EventsResponse(BaseModel):
    """Events response schema."""
    next_offset: int
    events: list[dict]
