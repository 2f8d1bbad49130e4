"""
Defensive one-ply agent for the computer player.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from engine.board import Board
from engine.scoring import check_patterns
from engine.templates import ShapeTemplate

logger = logging.getLogger(__name__)


class NoLegalColumnsError(RuntimeError):
    """Raised when a column is requested from a full board."""


class ThreatScanner:
    """
    Blocks the opponent's immediate scoring drops:
    - Simulate the opponent dropping into every legal column
    - If any of those drops would complete a shape, play one of them
    - Otherwise play a random legal column
    """

    def __init__(
        self,
        templates: Sequence[ShapeTemplate],
        rng: Optional[np.random.RandomState] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize threat scanner.

        Args:
            templates: Templates active for the round
            rng: Random source shared with the caller; takes precedence over seed
            seed: Random seed for reproducible behavior
        """
        self.templates = list(templates)
        self.rng = rng if rng is not None else np.random.RandomState(seed)

    def find_threat_columns(self, board: Board, opponent_marker: int) -> List[int]:
        """
        Columns where the opponent, moving next, would complete a template.

        The board passed in is never modified; each drop is simulated on a copy.
        """
        threats = []
        for column in board.legal_columns():
            scratch = board.copy()
            landing = scratch.drop_piece(column, opponent_marker)
            if check_patterns(scratch, landing, opponent_marker, self.templates):
                threats.append(column)
        return threats

    def select_column(self, board: Board, opponent_marker: int) -> int:
        """
        Select a column to drop into.

        Args:
            board: Current board
            opponent_marker: Grid marker of the player to defend against

        Returns:
            Selected column

        Raises:
            NoLegalColumnsError: if every column is full
        """
        legal_columns = board.legal_columns()
        if not legal_columns:
            raise NoLegalColumnsError("No legal columns available")

        threats = self.find_threat_columns(board, opponent_marker)
        if threats:
            column = threats[self.rng.randint(0, len(threats))]
            logger.debug(f"Blocking threat columns {threats}, chose {column}")
        else:
            column = legal_columns[self.rng.randint(0, len(legal_columns))]
            logger.debug(f"No threats, chose {column} from {legal_columns}")
        return int(column)

    def get_action_info(self) -> Dict[str, Any]:
        """Get information about the agent."""
        return {
            "name": "ThreatScanner",
            "type": "heuristic",
            "description": "Blocks columns where the opponent would complete a shape next move",
            "templates": [t.id for t in self.templates],
        }
