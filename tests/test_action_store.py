import pytest

from funscript import Funscript, FunscriptAction, ScriptEvent
from tests.conftest import make_script, positions, times


class TestAddAction:

    def test_same_time_overwrites(self):
        script = make_script([(100, 10)])
        script.add_action(FunscriptAction(100, 90))
        assert script.actions == [FunscriptAction(100, 90)]

    def test_insertions_stay_ordered(self):
        script = make_script([(300, 1), (100, 2), (200, 3), (0, 4)])
        assert times(script) == [0, 100, 200, 300]

    def test_never_stores_duplicate_times(self):
        script = Funscript()
        for i in range(50):
            script.add_action(FunscriptAction((i * 7) % 10, i))
        script.update()
        ats = times(script)
        assert len(ats) == len(set(ats))
        assert script.get_action(FunscriptAction(9, 47)) is not None  # last write at 9 wins


class TestEditAction:

    def test_edit_existing(self, script):
        assert script.edit_action(FunscriptAction(100, 100), FunscriptAction(120, 80))
        script.update()
        assert FunscriptAction(120, 80) in script.actions
        assert FunscriptAction(100, 100) not in script.actions

    def test_edit_missing_returns_false(self, script):
        assert not script.edit_action(FunscriptAction(100, 55), FunscriptAction(120, 80))
        assert not script.edit_action(FunscriptAction(150, 0), FunscriptAction(120, 80))

    def test_edit_past_neighbour_is_sorted_on_update(self, script):
        script.edit_action(FunscriptAction(100, 100), FunscriptAction(350, 50))
        script.update()
        assert times(script) == [0, 200, 300, 350, 400]

    def test_edit_onto_occupied_time_replaces_occupant(self, script):
        script.edit_action(FunscriptAction(100, 100), FunscriptAction(200, 42))
        script.update()
        assert times(script) == [0, 200, 300, 400]
        assert script.get_action_at_time(200, 0) == FunscriptAction(200, 42)

    def test_edit_drops_moved_action_from_selection(self, script):
        script.select_all()
        script.update()
        script.edit_action(FunscriptAction(100, 100), FunscriptAction(110, 100))
        assert FunscriptAction(100, 100) not in script.selection
        assert script.selection_size() == 4
        assert ScriptEvent.SELECTION_CHANGED in script.update()


class TestAddEditAndPaste:

    def test_add_edit_overwrites_close_action(self, script):
        script.add_edit_action(FunscriptAction(104, 70), tolerance_ms=10)
        script.update()
        assert times(script) == [0, 104, 200, 300, 400]
        assert script.get_action_at_time(104, 0).pos == 70

    def test_add_edit_inserts_when_nothing_close(self, script):
        script.add_edit_action(FunscriptAction(150, 70), tolerance_ms=10)
        assert len(script) == 6

    def test_paste_replaces_near_duplicate(self, script):
        script.paste_action(FunscriptAction(195, 33), tolerance_ms=10)
        script.update()
        assert times(script) == [0, 100, 195, 300, 400]

    def test_paste_without_near_action_inserts(self, script):
        script.paste_action(FunscriptAction(250, 33), tolerance_ms=10)
        assert len(script) == 6


class TestRemove:

    def test_remove_requires_exact_match(self, script):
        assert not script.remove_action(FunscriptAction(100, 99))
        assert script.remove_action(FunscriptAction(100, 100))
        assert times(script) == [0, 200, 300, 400]

    def test_remove_selected_fires_one_selection_event(self, script):
        script.select_action(FunscriptAction(100, 100))
        script.update()
        events = []
        script.subscribe(events.append)
        script.remove_action(FunscriptAction(100, 100))
        script.update()
        assert script.selection == []
        assert events.count(ScriptEvent.SELECTION_CHANGED) == 1
        assert events.count(ScriptEvent.ACTIONS_CHANGED) == 1

    def test_remove_batch(self, script):
        script.select_all()
        removed = script.remove_actions([FunscriptAction(0, 0), FunscriptAction(200, 0), FunscriptAction(999, 1)])
        assert removed == 2
        assert times(script) == [100, 300, 400]
        assert script.selection_size() == 3


class TestPositionAtTime:

    def test_empty_and_single(self):
        assert Funscript().get_position_at_time(500) == 0
        assert make_script([(100, 42)]).get_position_at_time(5000) == 42

    def test_interpolates_midpoint(self):
        script = make_script([(0, 0), (100, 100)])
        assert script.get_position_at_time(50) == pytest.approx(50.0)
        assert script.get_position_at_time(25) == pytest.approx(25.0)

    def test_exact_hit_returns_stored_position(self, script):
        assert script.get_position_at_time(300) == 100
        assert script.get_position_at_time(0) == 0

    def test_past_last_action_holds_last_position(self):
        script = make_script([(0, 10), (100, 70)])
        assert script.get_position_at_time(10_000) == 70


class TestActionAtTime:

    def test_picks_closest_within_tolerance(self):
        script = make_script([(100, 1), (110, 2), (130, 3)])
        assert script.get_action_at_time(112, 20) == FunscriptAction(110, 2)

    def test_none_outside_tolerance(self, script):
        assert script.get_action_at_time(150, 20) is None

    def test_tie_prefers_earlier(self):
        script = make_script([(100, 1), (120, 2)])
        assert script.get_action_at_time(110, 40) == FunscriptAction(100, 1)

    def test_neighbours(self, script):
        assert script.get_next_action_ahead(100) == FunscriptAction(200, 0)
        assert script.get_previous_action_behind(100) == FunscriptAction(0, 0)
        assert script.get_next_action_ahead(400) is None
        assert script.get_previous_action_behind(0) is None

    def test_actions_in_range_inclusive(self, script):
        assert [a.at for a in script.get_actions_in_range(100, 300)] == [100, 200, 300]


class TestMoveSelection:

    def test_time_move_is_bounded_by_next_neighbour(self, script):
        script.select_action(FunscriptAction(100, 100))
        script.move_selection_time(500, frame_time_ms=10)
        script.update()
        assert times(script) == [0, 190, 200, 300, 400]
        assert script.selection == [FunscriptAction(190, 100)]

    def test_time_move_is_bounded_by_previous_neighbour(self, script):
        script.select_time(200, 300)
        script.move_selection_time(-500, frame_time_ms=10)
        script.update()
        assert times(script) == [0, 100, 110, 210, 400]

    def test_time_move_within_bounds(self, script):
        script.select_action(FunscriptAction(200, 0))
        script.move_selection_time(20, frame_time_ms=10)
        script.update()
        assert times(script) == [0, 100, 220, 300, 400]

    def test_time_move_uses_frame_time_provider(self):
        script = make_script([(0, 0), (100, 50), (200, 0)], frame_time_ms=25.0)
        script.select_action(FunscriptAction(100, 50))
        script.move_selection_time(1000)
        assert script.selection == [FunscriptAction(175, 50)]

    def test_everything_selected_moves_freely(self, script):
        script.select_all()
        script.move_selection_time(1000)
        script.update()
        assert times(script) == [1000, 1100, 1200, 1300, 1400]
        assert script.selection_size() == 5

    def test_position_move_clamps(self, script):
        script.select_time(100, 200)
        script.move_selection_position(30)
        assert positions(script) == [0, 100, 30, 100, 0]
        assert sorted(script.selection) == [FunscriptAction(100, 100), FunscriptAction(200, 30)]

    def test_position_move_all(self, script):
        script.select_all()
        script.move_selection_position(-10)
        assert positions(script) == [0, 90, 0, 90, 0]

    def test_move_without_selection_is_noop(self, script):
        script.update()
        script.move_selection_time(50)
        script.move_selection_position(50)
        assert script.update() == []


class TestLookupsBeforeUpdate:

    def test_range_query_after_edit_past_neighbour(self, script):
        script.edit_action(FunscriptAction(0, 0), FunscriptAction(250, 40))
        assert [a.at for a in script.get_actions_in_range(200, 300)] == [200, 250, 300]

    def test_neighbours_after_edit_past_neighbour(self, script):
        script.edit_action(FunscriptAction(400, 0), FunscriptAction(50, 40))
        assert script.get_next_action_ahead(0) == FunscriptAction(50, 40)
        assert script.get_previous_action_behind(100) == FunscriptAction(50, 40)
        assert script.get_position_at_time(75) == pytest.approx(70.0)
