"""
Tests for the room state machine: joining, move legality, scoring, game end and rematch.
"""

import unittest

import numpy as np
import pytest
from pydantic import ValidationError

from engine.board import Position
from engine.game_room import CPU_PLAYER_ID, GameRoom, new_room
from engine.templates import select_random_templates
from schemas.game_config import RoomConfig
from schemas.game_state import GameStatus, PlayerKind
from tests.utils_game_states import fill_until, playing_room, templates


class TestLobby(unittest.TestCase):
    """Joining and starting."""

    def test_new_room_is_waiting(self):
        room = new_room("ROOM01")
        state = room.get_state()

        self.assertEqual(state.room_id, "ROOM01")
        self.assertEqual(state.status, GameStatus.WAITING)
        self.assertEqual(state.players, ())
        self.assertEqual(state.scores, (0, 0))
        self.assertEqual(state.current_turn, 0)
        self.assertEqual(len(state.selected_templates), 6)
        self.assertFalse(state.is_cpu_game)
        self.assertIsNone(room.cpu_agent)

    def test_two_humans_make_room_ready(self):
        room = GameRoom("ROOM01")
        self.assertTrue(room.add_player("p0", "Alice"))
        self.assertEqual(room.get_state().status, GameStatus.WAITING)
        self.assertTrue(room.add_player("p1", "Bob"))
        self.assertEqual(room.get_state().status, GameStatus.READY)

    def test_third_player_rejected(self):
        room = GameRoom("ROOM01")
        room.add_player("p0", "Alice")
        room.add_player("p1", "Bob")
        before = room.get_state()

        self.assertFalse(room.add_player("p2", "Carol"))
        self.assertEqual(room.get_state(), before)

    def test_cpu_room_seats_computer(self):
        room = GameRoom("ROOM01", is_cpu_game=True)
        self.assertTrue(room.add_player("p0", "Alice"))
        state = room.get_state()

        self.assertEqual(state.status, GameStatus.READY)
        self.assertEqual(len(state.players), 2)
        self.assertEqual(state.players[0].kind, PlayerKind.HUMAN)
        self.assertEqual(state.players[1].kind, PlayerKind.COMPUTER)
        self.assertEqual(state.players[1].id, CPU_PLAYER_ID)
        self.assertTrue(state.players[1].is_ready)
        self.assertFalse(room.add_player("p1", "Bob"))

    def test_cpu_player_name_from_config(self):
        room = GameRoom("ROOM01", is_cpu_game=True, config=RoomConfig(cpu_player_name="Robo"))
        room.add_player("p0", "Alice")
        self.assertEqual(room.get_state().players[1].name, "Robo")

    def test_start_game_only_from_ready(self):
        room = GameRoom("ROOM01")
        self.assertFalse(room.start_game())
        room.add_player("p0", "Alice")
        self.assertFalse(room.start_game())
        room.add_player("p1", "Bob")
        self.assertTrue(room.start_game())
        self.assertEqual(room.get_state().status, GameStatus.PLAYING)
        self.assertFalse(room.start_game())

    def test_template_count_from_config(self):
        room = new_room("ROOM01", config=RoomConfig(template_count=3, seed=1))
        self.assertEqual(len(room.get_state().selected_templates), 3)


class TestMakeMove(unittest.TestCase):
    """Move legality and piece settling."""

    def setUp(self):
        self.room = playing_room(active_templates=templates('3-line'))

    def assert_rejected(self, player_index, column):
        before = self.room.get_state()
        self.assertFalse(self.room.make_move(player_index, column))
        self.assertEqual(self.room.get_state(), before)

    def test_rejected_when_not_playing(self):
        room = GameRoom("ROOM01")
        room.add_player("p0", "Alice")
        room.add_player("p1", "Bob")
        before = room.get_state()
        self.assertFalse(room.make_move(0, 3))
        self.assertEqual(room.get_state(), before)

    def test_rejected_on_wrong_turn(self):
        self.assert_rejected(1, 3)

    def test_rejected_out_of_range(self):
        self.assert_rejected(0, -1)
        self.assert_rejected(0, 7)

    def test_rejected_non_integer_column(self):
        self.assert_rejected(0, "3")
        self.assert_rejected(0, 2.0)
        self.assert_rejected(0, None)

    def test_rejected_full_column(self):
        for _ in range(3):
            self.assertTrue(self.room.make_move(0, 0))
            self.assertTrue(self.room.make_move(1, 0))
        self.assertEqual(self.room.state.board.drop_row(0), None)

        self.assert_rejected(0, 0)
        self.assertEqual(self.room.get_state().current_turn, 0)

    def test_piece_settles_at_lowest_empty_row(self):
        before = np.array(self.room.get_state().board)
        self.assertTrue(self.room.make_move(0, 4))
        after = np.array(self.room.get_state().board)

        changed = np.argwhere(before != after)
        self.assertEqual(changed.tolist(), [[5, 4]])
        self.assertEqual(after[5, 4], 1)
        self.assertEqual(self.room.get_state().last_move.model_dump(), {"x": 4, "y": 5})

        self.assertTrue(self.room.make_move(1, 4))
        self.assertEqual(self.room.get_state().board[4][4], 2)

    def test_turn_alternates(self):
        turns = []
        for column in (0, 1, 2, 3):
            turn = self.room.get_state().current_turn
            turns.append(turn)
            self.assertTrue(self.room.make_move(turn, column))
        self.assertEqual(turns, [0, 1, 0, 1])

    def test_three_line_scenario(self):
        for player_index, column in [(0, 0), (1, 6), (0, 1), (1, 6)]:
            self.assertTrue(self.room.make_move(player_index, column))
        self.assertEqual(self.room.get_state().scores, (0, 0))

        self.assertTrue(self.room.make_move(0, 2))
        state = self.room.get_state()

        self.assertEqual(state.scores, (1, 0))
        self.assertEqual(len(state.last_score_results), 1)
        result = state.last_score_results[0]
        self.assertEqual(result.template_id, '3-line')
        self.assertEqual(result.points, 1)
        self.assertEqual({(p.x, p.y) for p in result.positions}, {(0, 5), (1, 5), (2, 5)})

    def test_last_score_results_cleared_by_next_move(self):
        for player_index, column in [(0, 0), (1, 6), (0, 1), (1, 6), (0, 2)]:
            self.room.make_move(player_index, column)
        self.assertEqual(len(self.room.get_state().last_score_results), 1)

        self.room.make_move(1, 5)
        self.assertEqual(self.room.get_state().last_score_results, ())

    def test_scores_never_decrease(self):
        room = playing_room(seed=5)
        previous = (0, 0)
        while room.state.status == GameStatus.PLAYING:
            column = room.state.board.legal_columns()[-1]
            room.make_move(room.state.current_turn, column)
            scores = room.get_state().scores
            self.assertGreaterEqual(scores[0], previous[0])
            self.assertGreaterEqual(scores[1], previous[1])
            previous = scores


class TestGameEnd(unittest.TestCase):
    """Finishing on a full top row."""

    def _almost_full_room(self):
        room = playing_room(active_templates=[])
        fill_until(room, moves_left=1)
        self.assertEqual(room.state.board.piece_count(), 41)
        self.assertEqual(room.state.current_turn, 1)
        return room

    def test_tie_has_no_winner(self):
        room = self._almost_full_room()
        column = room.state.board.legal_columns()[0]
        self.assertTrue(room.make_move(1, column))

        state = room.get_state()
        self.assertEqual(state.status, GameStatus.FINISHED)
        self.assertIsNone(state.winner)
        self.assertTrue(state.is_draw)

    def test_higher_score_wins(self):
        for scores, winner in (([4, 3], 0), ([0, 3], 1)):
            room = self._almost_full_room()
            room.state.scores = list(scores)
            self.assertTrue(room.make_move(1, room.state.board.legal_columns()[0]))
            state = room.get_state()
            self.assertEqual(state.status, GameStatus.FINISHED)
            self.assertEqual(state.winner, winner)

    def test_turn_not_toggled_by_final_move(self):
        room = self._almost_full_room()
        room.make_move(1, room.state.board.legal_columns()[0])
        self.assertEqual(room.get_state().current_turn, 1)

    def test_moves_rejected_after_finish(self):
        room = playing_room(seed=2)
        moves = fill_until(room)
        self.assertEqual(moves, 42)

        state = room.get_state()
        self.assertEqual(state.status, GameStatus.FINISHED)
        if state.scores[0] != state.scores[1]:
            self.assertEqual(state.winner, 0 if state.scores[0] > state.scores[1] else 1)
        for player_index in (0, 1):
            for column in range(7):
                self.assertFalse(room.make_move(player_index, column))
        self.assertEqual(room.get_state(), state)


class TestRematch(unittest.TestCase):
    """Resetting a room for another round."""

    def test_rematch_after_finish(self):
        room = playing_room(seed=4)
        fill_until(room)
        players_before = room.get_state().players

        self.assertTrue(room.rematch())
        state = room.get_state()

        self.assertEqual(state.status, GameStatus.PLAYING)
        self.assertEqual(state.room_id, "TEST01")
        self.assertEqual(state.players, players_before)
        self.assertEqual(state.scores, (0, 0))
        self.assertEqual(state.current_turn, 0)
        self.assertIsNone(state.winner)
        self.assertIsNone(state.last_move)
        self.assertEqual(state.last_score_results, ())
        self.assertTrue(all(cell == 0 for row in state.board for cell in row))
        self.assertEqual(len(state.selected_templates), 6)
        self.assertTrue(room.make_move(0, 3))

    def test_rematch_draws_next_template_set(self):
        room = GameRoom("ROOM02", rng=np.random.RandomState(7))
        room.add_player("p0", "Alice")
        room.add_player("p1", "Bob")
        room.start_game()
        room.make_move(0, 3)

        reference = np.random.RandomState(7)
        first_draw = select_random_templates(rng=reference)
        second_draw = select_random_templates(rng=reference)
        self.assertEqual(room.state.selected_templates, first_draw)

        self.assertTrue(room.rematch())
        self.assertEqual(room.state.selected_templates, second_draw)
        self.assertEqual(
            [t.id for t in room.get_state().selected_templates],
            [t.id for t in second_draw],
        )

    def test_rematch_rejected_before_play(self):
        room = GameRoom("ROOM01")
        room.add_player("p0", "Alice")
        self.assertFalse(room.rematch())
        self.assertEqual(room.get_state().status, GameStatus.WAITING)

    def test_rematch_rebuilds_cpu_agent(self):
        room = playing_room(is_cpu_game=True)
        old_agent = room.cpu_agent
        room.make_move(0, 0)
        self.assertTrue(room.rematch())

        self.assertIsNot(room.cpu_agent, old_agent)
        self.assertEqual(room.cpu_agent.templates, room.state.selected_templates)
        self.assertTrue(room.get_state().is_cpu_game)


class TestCPUMove(unittest.TestCase):
    """Computer turns."""

    def test_cpu_moves_on_its_turn(self):
        room = playing_room(is_cpu_game=True)
        self.assertTrue(room.make_move(0, 3))
        self.assertTrue(room.make_cpu_move())

        state = room.get_state()
        self.assertEqual(state.current_turn, 0)
        self.assertEqual(sum(cell == 2 for row in state.board for cell in row), 1)

    def test_cpu_move_rejected_on_human_turn(self):
        room = playing_room(is_cpu_game=True)
        before = room.get_state()
        self.assertFalse(room.make_cpu_move())
        self.assertEqual(room.get_state(), before)

    def test_cpu_move_rejected_in_human_room(self):
        room = playing_room()
        room.make_move(0, 3)
        self.assertFalse(room.make_cpu_move())

    def test_cpu_blocks_threat(self):
        room = playing_room(is_cpu_game=True, active_templates=templates('3-line'))
        room.cpu_agent.templates = room.state.selected_templates

        room.make_move(0, 0)
        room.state.current_turn = 0  # let the human drop twice in a row
        room.make_move(0, 1)
        self.assertTrue(room.make_cpu_move())
        self.assertEqual(room.state.last_move, Position(2, 5))

    def test_cpu_move_after_finish_is_noop(self):
        room = playing_room(is_cpu_game=True, active_templates=[])
        room.cpu_agent.templates = []
        while room.state.status == GameStatus.PLAYING:
            if room.state.current_turn == 0:
                room.make_move(0, room.state.board.legal_columns()[0])
            else:
                self.assertTrue(room.make_cpu_move())
        self.assertFalse(room.make_cpu_move())

    def test_seeded_rooms_replay_identically(self):
        def play(seed):
            room = GameRoom("ROOM01", is_cpu_game=True, rng=np.random.RandomState(seed))
            room.add_player("p0", "Alice")
            room.start_game()
            for column in (3, 3, 2, 4):
                room.make_move(0, column)
                room.make_cpu_move()
            return room.get_state()

        self.assertEqual(play(11), play(11))


class TestSnapshot:
    """get_state returns a detached value."""

    def test_snapshot_is_frozen(self):
        room = playing_room()
        state = room.get_state()
        with pytest.raises(ValidationError):
            state.current_turn = 1

    def test_dumped_snapshot_is_detached(self):
        room = playing_room()
        room.make_move(0, 0)
        dumped = room.get_state().model_dump()
        dumped["scores"] = (99, 99)
        dumped["players"][0]["name"] = "Mallory"

        state = room.get_state()
        assert state.scores == (0, 0)
        assert state.players[0].name == "Alice"

    def test_snapshot_not_affected_by_later_moves(self):
        room = playing_room()
        snapshot = room.get_state()
        room.make_move(0, 0)
        assert snapshot.board[5][0] == 0
        assert snapshot.current_turn == 0
