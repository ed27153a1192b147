import pytest

from funscript import FunscriptAction, ScriptEvent
from funscript.plugins import EqualizePlugin, FrameAlignPlugin, RangeExtendPlugin, create_default_registry
from funscript.plugins.range_extend_plugin import extend_range, find_stroke_bounds
from tests.conftest import make_script, positions, times


def _select_all(points):
    script = make_script(points)
    script.select_all()
    return script


class TestRangeExtend:

    def test_stroke_bounds(self):
        assert find_stroke_bounds([20, 50, 80, 50, 20]) == [0, 2, 4]
        assert find_stroke_bounds([10, 10, 90, 90, 10]) == [0, 3, 4]
        assert find_stroke_bounds([]) == []
        assert find_stroke_bounds([42]) == [0]

    def test_extend_widens_every_stroke(self):
        assert extend_range([20, 50, 80, 50, 20], 10) == [20, 50, 90, 40, 20]

    def test_negative_amount_narrows(self):
        assert extend_range([20, 50, 80, 50, 20], -10) == [20, 50, 70, 60, 20]

    def test_first_and_last_points_stay(self):
        extended = extend_range([20, 80, 20, 80, 20, 80], 10)
        assert extended[0] == 20
        assert extended[-1] == 80
        assert extended[1:-1] == [90, 10, 90, 10]

    def test_result_is_clamped(self):
        assert extend_range([5, 95, 5, 95, 5], 20) == [5, 100, 0, 100, 5]

    def test_flat_stroke_untouched(self):
        assert extend_range([50, 50, 50], 30) == [50, 50, 50]

    def test_two_points_untouched(self):
        assert extend_range([20, 80], 10) == [20, 80]

    def test_on_script_clears_selection(self):
        script = _select_all([(0, 20), (100, 50), (200, 80), (300, 50), (400, 20)])
        assert script.range_extend_selection(10)
        assert positions(script) == [20, 50, 90, 40, 20]
        assert times(script) == [0, 100, 200, 300, 400]
        assert not script.has_selection()

    def test_zero_amount_is_noop(self):
        script = _select_all([(0, 20), (100, 80)])
        script.update()
        assert script.range_extend_selection(0)
        assert positions(script) == [20, 80]
        assert script.selection_size() == 2
        assert script.update() == []

    def test_only_selected_actions_change(self):
        script = make_script([(0, 20), (100, 80), (200, 20), (300, 80)])
        script.select_time(0, 200)
        script.range_extend_selection(10)
        assert positions(script) == [20, 90, 20, 80]

    def test_amount_out_of_range_is_rejected(self):
        script = _select_all([(0, 20), (100, 80)])
        assert not script.range_extend_selection(500)
        assert positions(script) == [20, 80]


class TestEqualize:

    def test_spreads_interior_points(self):
        script = _select_all([(0, 0), (10, 100), (23, 0), (50, 100)])
        assert script.equalize_selection()
        script.update()
        assert times(script) == [0, 17, 34, 50]
        assert positions(script) == [0, 100, 0, 100]
        assert [a.at for a in script.selection] == [0, 17, 34, 50]

    def test_needs_three_points(self):
        script = _select_all([(0, 0), (10, 100)])
        script.equalize_selection()
        assert times(script) == [0, 10]

    def test_untouched_outside_selection(self):
        script = make_script([(0, 0), (10, 100), (40, 0), (100, 50)])
        script.select_time(0, 40)
        script.equalize_selection()
        script.update()
        assert times(script) == [0, 20, 40, 100]


class TestInvert:

    def test_mirrors_positions(self):
        script = _select_all([(0, 0), (100, 30), (200, 100)])
        assert script.invert_selection()
        script.update()
        assert positions(script) == [100, 70, 0]
        assert script.selection == script.actions

    def test_without_selection_does_nothing(self):
        script = make_script([(0, 10)])
        script.invert_selection()
        assert positions(script) == [10]


class TestFrameAlign:

    def test_snaps_down_to_frame(self):
        script = _select_all([(123, 50)])
        assert script.align_selection_to_frame_grid(40.0)
        assert script.actions == [FunscriptAction(120, 50)]
        assert script.selection == [FunscriptAction(120, 50)]

    def test_uses_frame_time_provider_by_default(self):
        script = make_script([(95, 10), (205, 20)], frame_time_ms=50.0)
        script.select_all()
        script.align_selection_to_frame_grid()
        script.update()
        assert times(script) == [50, 200]

    def test_rejects_non_positive_frame_time(self):
        script = _select_all([(123, 50)])
        assert not script.align_selection_to_frame_grid(0)
        assert times(script) == [123]


class TestRegistry:

    def test_default_registry_has_builtins(self):
        registry = create_default_registry()
        names = {info['name'] for info in registry.list_plugins()}
        assert names == {"Range Extend", "Equalize", "Invert", "Align To Frame Grid"}
        assert "Equalize" in registry

    def test_unknown_plugin(self):
        script = make_script([(0, 0)])
        assert not script.apply_plugin("Does Not Exist")

    def test_unregister(self):
        registry = create_default_registry()
        assert registry.unregister("Invert")
        assert not registry.unregister("Invert")
        assert registry.get_plugin("Invert") is None

    def test_validate_parameters(self):
        plugin = RangeExtendPlugin()
        assert plugin.validate_parameters({'amount': "15"}) == {'amount': 15}
        with pytest.raises(ValueError, match="missing"):
            plugin.validate_parameters({})
        with pytest.raises(ValueError, match="Unknown"):
            plugin.validate_parameters({'amount': 1, 'speed': 2})
        with pytest.raises(ValueError, match="type int"):
            plugin.validate_parameters({'amount': "lots"})
        with pytest.raises(ValueError, match="> 0"):
            FrameAlignPlugin().validate_parameters({'frame_time_ms': -1.0})

    def test_plugin_metadata(self):
        assert EqualizePlugin().min_selection == 3
        assert RangeExtendPlugin().version == "1.0.0"

    def test_transform_marks_actions_changed(self):
        script = _select_all([(0, 0), (100, 30)])
        script.update()
        script.invert_selection()
        assert ScriptEvent.ACTIONS_CHANGED in script.update()
