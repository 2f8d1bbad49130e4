"""
Column-choosing agent protocol used by rooms and the self-play script.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from engine.board import Board


@runtime_checkable
class ColumnAgentProtocol(Protocol):
    """
    Minimal gameplay contract for computer players.
    """

    def select_column(self, board: Board, opponent_marker: int) -> int:
        ...
