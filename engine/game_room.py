"""
Turn-based state machine for one Shape Drop room.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import numpy as np

from schemas.game_config import RoomConfig
from schemas.game_state import (
    GameStateSnapshot, GameStatus, PlayerKind, PlayerState,
    Position as PositionState, ScoreResultState, TemplateState
)

from .board import Board, Position, marker_for_player
from .scoring import ScoreResult, calculate_score, check_patterns
from .templates import ShapeTemplate, select_random_templates

if TYPE_CHECKING:
    from agents.gameplay_protocol import ColumnAgentProtocol

logger = logging.getLogger(__name__)

CPU_PLAYER_ID = "cpu"
CPU_PLAYER_INDEX = 1
MAX_PLAYERS = 2


@dataclass
class Player:
    """A seated player."""
    id: str
    name: str
    is_ready: bool = False
    kind: PlayerKind = PlayerKind.HUMAN

    @property
    def is_computer(self) -> bool:
        return self.kind == PlayerKind.COMPUTER


@dataclass
class GameState:
    """Mutable state of one room. Only its GameRoom touches it."""
    room_id: str
    is_cpu_game: bool
    selected_templates: List[ShapeTemplate]
    players: List[Player] = field(default_factory=list)
    board: Board = field(default_factory=Board)
    scores: List[int] = field(default_factory=lambda: [0, 0])
    current_turn: int = 0
    status: GameStatus = GameStatus.WAITING
    winner: Optional[int] = None
    last_move: Optional[Position] = None
    last_score_results: List[ScoreResult] = field(default_factory=list)


class GameRoom:
    """
    Owns one room's state and enforces the rules.

    Rule violations (wrong status, wrong turn, bad or full column, full room)
    are reported by returning False and leave the state untouched. A room is
    meant for single-threaded use; share it across threads through
    ``RoomManager``.
    """

    def __init__(
        self,
        room_id: str,
        is_cpu_game: bool = False,
        config: Optional[RoomConfig] = None,
        rng: Optional[np.random.RandomState] = None,
    ):
        """
        Initialize a room.

        Args:
            room_id: Room identifier assigned by the caller
            is_cpu_game: Whether the second seat is taken by the computer
            config: Room configuration (defaults when None)
            rng: Random source for template draws and computer tie-breaks;
                seeded from config.seed when None
        """
        self.config = config or RoomConfig()
        self.rng = rng if rng is not None else np.random.RandomState(self.config.seed)
        self.state = GameState(
            room_id=room_id,
            is_cpu_game=is_cpu_game,
            selected_templates=self._draw_templates(),
        )
        self.cpu_agent: Optional["ColumnAgentProtocol"] = self._create_cpu_agent() if is_cpu_game else None

        logger.info(
            f"Room {room_id} created (cpu={is_cpu_game}, "
            f"templates={[t.id for t in self.state.selected_templates]})"
        )

    @property
    def room_id(self) -> str:
        return self.state.room_id

    def _draw_templates(self) -> List[ShapeTemplate]:
        return select_random_templates(
            count=self.config.template_count,
            rng=self.rng,
            small_quota=self.config.small_template_quota,
            small_max_size=self.config.small_template_max_size,
        )

    def _create_cpu_agent(self) -> "ColumnAgentProtocol":
        # agents imports engine, so this import cannot live at module level
        from agents.threat_scanner import ThreatScanner
        return ThreatScanner(self.state.selected_templates, rng=self.rng)

    def add_player(self, player_id: str, player_name: str) -> bool:
        """
        Seat a human player.

        In a CPU room the first human is joined by the computer player and the
        room becomes ready; otherwise the room is ready once two humans sit.
        """
        state = self.state
        if len(state.players) >= MAX_PLAYERS:
            logger.debug(f"Room {state.room_id}: rejected join of {player_id}, room full")
            return False

        state.players.append(Player(id=player_id, name=player_name))

        if state.is_cpu_game and len(state.players) == 1:
            state.players.append(Player(
                id=CPU_PLAYER_ID,
                name=self.config.cpu_player_name,
                is_ready=True,
                kind=PlayerKind.COMPUTER,
            ))
            state.status = GameStatus.READY
        elif len(state.players) == MAX_PLAYERS:
            state.status = GameStatus.READY

        logger.info(f"Room {state.room_id}: {player_name} joined ({len(state.players)}/{MAX_PLAYERS})")
        return True

    def start_game(self) -> bool:
        """Move a ready room into play."""
        if self.state.status != GameStatus.READY:
            return False
        self.state.status = GameStatus.PLAYING
        logger.info(f"Room {self.state.room_id}: game started")
        return True

    def _rejection_reason(self, player_index: int, column: int) -> Optional[str]:
        state = self.state
        if state.status != GameStatus.PLAYING:
            return f"status is {state.status.value}"
        if player_index != state.current_turn:
            return f"not player {player_index}'s turn"
        if isinstance(column, bool) or not isinstance(column, (int, np.integer)):
            return f"column {column!r} is not an integer"
        if not 0 <= column < Board.WIDTH:
            return f"column {column} out of range"
        if state.board.is_column_full(column):
            return f"column {column} is full"
        return None

    def make_move(self, player_index: int, column: int) -> bool:
        """
        Drop the current player's piece into a column.

        Args:
            player_index: Seat of the acting player (0 or 1)
            column: Column to drop into (0-6)

        Returns:
            True if the move was accepted
        """
        reason = self._rejection_reason(player_index, column)
        if reason is not None:
            logger.debug(f"Room {self.state.room_id}: rejected move ({reason})")
            return False

        state = self.state
        marker = marker_for_player(player_index)
        landing = state.board.drop_piece(int(column), marker)

        results = check_patterns(state.board, landing, marker, state.selected_templates)
        points = calculate_score(results)
        state.last_move = landing
        state.last_score_results = results
        state.scores[player_index] += points

        logger.debug(
            f"Room {state.room_id}: player {player_index} dropped at ({landing.x}, {landing.y}), "
            f"scored {points}"
        )

        if state.board.is_top_row_full():
            self._finish_game()
        else:
            state.current_turn = 1 - state.current_turn

        return True

    def _finish_game(self) -> None:
        state = self.state
        state.status = GameStatus.FINISHED
        if state.scores[0] > state.scores[1]:
            state.winner = 0
        elif state.scores[1] > state.scores[0]:
            state.winner = 1
        else:
            state.winner = None
        logger.info(f"Room {state.room_id}: game finished, scores={state.scores}, winner={state.winner}")

    def make_cpu_move(self) -> bool:
        """
        Let the computer player take its turn.

        Only valid in CPU rooms while playing and when the computer's seat is
        to move; otherwise a no-op returning False.
        """
        state = self.state
        if not state.is_cpu_game or self.cpu_agent is None:
            return False
        if len(state.players) <= CPU_PLAYER_INDEX or not state.players[CPU_PLAYER_INDEX].is_computer:
            return False
        if state.status != GameStatus.PLAYING or state.current_turn != CPU_PLAYER_INDEX:
            return False

        human_marker = marker_for_player(1 - CPU_PLAYER_INDEX)
        column = self.cpu_agent.select_column(state.board, human_marker)
        return self.make_move(CPU_PLAYER_INDEX, column)

    def rematch(self) -> bool:
        """
        Reset the board for a new round with the same players.

        Accepted while playing or finished; the room goes straight to playing.
        """
        state = self.state
        if state.status not in (GameStatus.PLAYING, GameStatus.FINISHED):
            return False

        state.board = Board()
        state.scores = [0, 0]
        state.current_turn = 0
        state.selected_templates = self._draw_templates()
        state.status = GameStatus.PLAYING
        state.winner = None
        state.last_move = None
        state.last_score_results = []

        if state.is_cpu_game:
            self.cpu_agent = self._create_cpu_agent()

        logger.info(f"Room {state.room_id}: rematch with {[t.id for t in state.selected_templates]}")
        return True

    def get_state(self) -> GameStateSnapshot:
        """Value snapshot of the room."""
        state = self.state
        return GameStateSnapshot(
            room_id=state.room_id,
            players=tuple(
                PlayerState(id=p.id, name=p.name, is_ready=p.is_ready, kind=p.kind)
                for p in state.players
            ),
            board=state.board.to_rows(),
            scores=(state.scores[0], state.scores[1]),
            current_turn=state.current_turn,
            selected_templates=tuple(_template_state(t) for t in state.selected_templates),
            status=state.status,
            winner=state.winner,
            last_move=_position_state(state.last_move) if state.last_move else None,
            last_score_results=tuple(_score_result_state(r) for r in state.last_score_results),
            is_cpu_game=state.is_cpu_game,
        )


def _position_state(pos: Position) -> PositionState:
    return PositionState(x=pos.x, y=pos.y)


def _template_state(template: ShapeTemplate) -> TemplateState:
    return TemplateState(
        id=template.id,
        name=template.name,
        positions=template.positions,
        points=template.points,
        size=template.size,
    )


def _score_result_state(result: ScoreResult) -> ScoreResultState:
    return ScoreResultState(
        template_id=result.template.id,
        template_name=result.template.name,
        positions=tuple(_position_state(p) for p in result.positions),
        points=result.points,
    )


def new_room(
    room_id: str,
    is_cpu_game: bool = False,
    config: Optional[RoomConfig] = None,
    rng: Optional[np.random.RandomState] = None,
) -> GameRoom:
    """Create a room with a freshly drawn template set."""
    return GameRoom(room_id, is_cpu_game=is_cpu_game, config=config, rng=rng)
