"""
Game state snapshot schemas.

Snapshots are frozen and built from tuples, so a caller holding one cannot
reach back into the room that produced it.
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class GameStatus(str, Enum):
    """Room lifecycle status."""
    WAITING = "waiting"
    READY = "ready"
    PLAYING = "playing"
    FINISHED = "finished"


class PlayerKind(str, Enum):
    """Who is behind a player slot."""
    HUMAN = "human"
    COMPUTER = "computer"


class Position(BaseModel):
    """Absolute board coordinate."""
    model_config = ConfigDict(frozen=True)

    x: int = Field(ge=0, le=6, description="Column")
    y: int = Field(ge=0, le=5, description="Row, 0 = top")


class PlayerState(BaseModel):
    """State of a player slot."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    is_ready: bool
    kind: PlayerKind = PlayerKind.HUMAN


class TemplateState(BaseModel):
    """An active shape template."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    positions: Tuple[Tuple[int, int], ...] = Field(description="Relative (x, y) offsets")
    points: int = Field(ge=0)
    size: int = Field(ge=1)


class ScoreResultState(BaseModel):
    """A shape completed by the last move."""
    model_config = ConfigDict(frozen=True)

    template_id: str
    template_name: str
    positions: Tuple[Position, ...]
    points: int = Field(ge=0)


class GameStateSnapshot(BaseModel):
    """Read-only view of one room."""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "room_id": "AB12CD",
                "players": [
                    {"id": "player-1", "name": "Alice", "is_ready": False, "kind": "human"},
                    {"id": "cpu", "name": "CPU (Easy)", "is_ready": True, "kind": "computer"},
                ],
                "board": [[0, 0, 0, 0, 0, 0, 0]] * 6,
                "scores": [0, 0],
                "current_turn": 0,
                "status": "playing",
                "winner": None,
                "last_move": None,
                "last_score_results": [],
                "is_cpu_game": True,
            }
        },
    )

    room_id: str
    players: Tuple[PlayerState, ...] = Field(max_length=2)
    board: Tuple[Tuple[int, ...], ...] = Field(description="6 rows of 7 cells, top row first")
    scores: Tuple[int, int]
    current_turn: int = Field(ge=0, le=1)
    selected_templates: Tuple[TemplateState, ...]
    status: GameStatus
    winner: Optional[int] = Field(default=None, description="Winning player index, None for a draw or unfinished game")
    last_move: Optional[Position] = None
    last_score_results: Tuple[ScoreResultState, ...] = ()
    is_cpu_game: bool = False

    @property
    def is_draw(self) -> bool:
        return self.status == GameStatus.FINISHED and self.winner is None
