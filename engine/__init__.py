"""
Shape Drop game engine package.

This package contains the core game logic for Shape Drop, including:
- Board management and gravity drops
- Shape templates and their rotations/reflections
- Pattern matching and scoring
- Per-room game state machine and room registry
"""

from .board import Board, Cell, Position
from .game_room import GameRoom, new_room
from .room_manager import RoomManager
from .scoring import ScoreResult, calculate_score, check_patterns
from .symmetry import expand
from .templates import TEMPLATES, ShapeTemplate, get_template_by_id, select_random_templates

__all__ = [
    'Board', 'Cell', 'Position',
    'ShapeTemplate', 'TEMPLATES', 'get_template_by_id', 'select_random_templates',
    'expand',
    'ScoreResult', 'check_patterns', 'calculate_score',
    'GameRoom', 'new_room', 'RoomManager',
]
