"""
Pattern matching and scoring for completed shapes.

``check_patterns`` is run once per accepted placement. For each active template
it tries the linear strategy first and falls back to the exact-shape strategy
only when the linear strategy finds nothing for that template.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .board import Board, Position
from .symmetry import expand
from .templates import Offset, ShapeTemplate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreResult:
    """One realized occurrence of a template on the board."""
    template: ShapeTemplate
    positions: Tuple[Position, ...]  # absolute board coordinates
    points: int

    def position_set(self) -> frozenset:
        return frozenset(self.positions)


def linear_step(positions: Sequence[Offset]) -> Optional[Offset]:
    """
    Step vector of a collinear, evenly spaced template, or None.

    The step is taken from the first two points; every other point must sit
    at ``p0 + i * step``. Templates with fewer than 2 points have no step.
    """
    if len(positions) < 2:
        return None

    x0, y0 = positions[0]
    dx, dy = positions[1][0] - x0, positions[1][1] - y0
    if dx == 0 and dy == 0:
        return None

    for i, (x, y) in enumerate(positions):
        if (x, y) != (x0 + i * dx, y0 + i * dy):
            return None
    return (dx, dy)


def _walk(board: Board, start: Position, step: Offset, max_steps: int) -> List[Position]:
    """Cells along ``step`` from ``start`` (exclusive), stopping at the board edge."""
    cells = []
    for i in range(1, max_steps + 1):
        pos = Position(start.x + i * step[0], start.y + i * step[1])
        if not board.is_valid_position(pos):
            break
        cells.append(pos)
    return cells


def match_linear(board: Board, last_move: Position, player: int, template: ShapeTemplate) -> List[ScoreResult]:
    """
    Linear strategy for straight-line templates.

    Walks up to ``size - 1`` cells forward and backward from ``last_move``
    (stopping only at edges, not at foreign cells), then keeps the cells owned
    by ``player`` in run order. The first ``size`` owned cells form the match;
    they do not have to be contiguous within the run.
    """
    step = linear_step(template.positions)
    if step is None:
        return []

    size = template.size
    forward = _walk(board, last_move, step, size - 1)
    backward = _walk(board, last_move, (-step[0], -step[1]), size - 1)
    run = list(reversed(backward)) + [last_move] + forward

    owned = [pos for pos in run if board.get_cell(pos) == player]
    if len(owned) < size:
        return []

    return [ScoreResult(template=template, positions=tuple(owned[:size]), points=template.points)]


def match_exact_shape(board: Board, last_move: Position, player: int, template: ShapeTemplate) -> List[ScoreResult]:
    """
    Exact-shape strategy for every template.

    Each of the 8 variants is anchored at each of its own points in turn, so the
    just-placed piece can sit anywhere inside the shape. Occurrences with a
    coordinate set equal to one already found are dropped.
    """
    results: List[ScoreResult] = []
    seen = set()

    for variant in expand(template):
        for anchor_x, anchor_y in variant:
            off_x = last_move.x - anchor_x
            off_y = last_move.y - anchor_y
            absolute = tuple(Position(x + off_x, y + off_y) for x, y in variant)

            if not all(board.get_cell(pos) == player for pos in absolute):
                continue

            key = frozenset(absolute)
            if key in seen:
                continue
            seen.add(key)
            results.append(ScoreResult(template=template, positions=absolute, points=template.points))

    return results


def check_patterns(
    board: Board,
    last_move: Position,
    player: int,
    templates: Iterable[ShapeTemplate],
) -> List[ScoreResult]:
    """
    Find every shape completed by the piece at ``last_move``.

    Args:
        board: Board with the new piece already placed
        last_move: Coordinate that was just filled
        player: Grid marker of the acting player
        templates: Active templates for the round

    Returns:
        Completed shapes; a template may appear several times, but never
        twice with the same coordinate set
    """
    results: List[ScoreResult] = []

    for template in templates:
        matches = match_linear(board, last_move, player, template)
        if not matches:
            matches = match_exact_shape(board, last_move, player, template)

        for match in matches:
            duplicate = any(
                existing.template.id == template.id and existing.position_set() == match.position_set()
                for existing in results
            )
            if not duplicate:
                results.append(match)

    if results:
        logger.debug(
            f"Player {player} at ({last_move.x}, {last_move.y}) completed "
            f"{[r.template.id for r in results]}"
        )
    return results


def calculate_score(results: Iterable[ScoreResult]) -> int:
    """Sum of points over match results."""
    return sum(result.points for result in results)
