#!/usr/bin/env python3
"""
Play complete Shape Drop games between computer players and log the results.

Both seats of a regular room are driven by ThreatScanner agents, or, with
``--vs-cpu``, seat 0 is a scanner and seat 1 is the room's own computer player.
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict, List

import numpy as np

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from agents.gameplay_protocol import ColumnAgentProtocol
from agents.threat_scanner import ThreatScanner
from engine.board import Board, marker_for_player
from engine.room_manager import RoomManager
from schemas.game_config import RoomConfig
from schemas.game_state import GameStatus
from utils.logging_setup import get_log_level, setup_logging

logger = logging.getLogger(__name__)


def play_game(manager: RoomManager, room_id: str, vs_cpu: bool, rng: np.random.RandomState) -> Dict[str, Any]:
    """
    Play one game to completion in a fresh room.

    Returns:
        Summary with scores, winner and move count
    """
    manager.create_room(room_id, is_cpu_game=vs_cpu, rng=rng)
    manager.run(room_id, lambda r: r.add_player(f"{room_id}-p0", "Scanner A"))
    if not vs_cpu:
        manager.run(room_id, lambda r: r.add_player(f"{room_id}-p1", "Scanner B"))
    manager.run(room_id, lambda r: r.start_game())

    templates = manager.run(room_id, lambda r: list(r.state.selected_templates))
    scanners: List[ColumnAgentProtocol] = [ThreatScanner(templates, rng=rng), ThreatScanner(templates, rng=rng)]
    moves = 0

    state = manager.run(room_id, lambda r: r.get_state())
    while state.status == GameStatus.PLAYING:
        turn = state.current_turn
        if vs_cpu and turn == 1:
            accepted = manager.run(room_id, lambda r: r.make_cpu_move())
        else:
            opponent = marker_for_player(1 - turn)
            column = scanners[turn].select_column(Board.from_rows(state.board), opponent)
            accepted = manager.run(room_id, lambda r: r.make_move(turn, column))
        if not accepted:
            raise RuntimeError(f"Room {room_id}: move rejected on turn {turn}")
        moves += 1
        state = manager.run(room_id, lambda r: r.get_state())

    return {
        "room_id": room_id,
        "templates": [t.id for t in state.selected_templates],
        "scores": list(state.scores),
        "winner": state.winner,
        "moves": moves,
    }


def main(games: int, seed: int, vs_cpu: bool):
    rng = np.random.RandomState(seed)
    manager = RoomManager(RoomConfig.from_env())
    wins = [0, 0]
    draws = 0

    for i in range(games):
        summary = play_game(manager, f"GAME{i:03d}", vs_cpu, rng)
        logger.info(
            f"{summary['room_id']}: scores={summary['scores']} winner={summary['winner']} "
            f"moves={summary['moves']} templates={summary['templates']}"
        )
        if summary["winner"] is None:
            draws += 1
        else:
            wins[summary["winner"]] += 1
        manager.remove_room(summary["room_id"])

    logger.info(f"Completed {games} games: seat0={wins[0]} seat1={wins[1]} draws={draws}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Shape Drop self-play")
    parser.add_argument("--games", type=int, default=10, help="Number of games to play")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--vs-cpu", action="store_true", help="Let the room's computer player take seat 1")
    args = parser.parse_args()

    setup_logging(get_log_level())
    main(args.games, args.seed, args.vs_cpu)
