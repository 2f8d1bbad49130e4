"""
Pydantic schemas for Shape Drop room snapshots and configuration.
"""

from .game_config import RoomConfig
from .game_state import (
    GameStatus, GameStateSnapshot, PlayerKind, PlayerState,
    Position, ScoreResultState, TemplateState
)

__all__ = [
    "RoomConfig",
    "GameStatus",
    "GameStateSnapshot",
    "PlayerKind",
    "PlayerState",
    "Position",
    "ScoreResultState",
    "TemplateState",
]
