import pytest

from funscript import Funscript, FunscriptAction


def make_script(points, frame_time_ms=10.0):
    """Builds a script from ``(at, pos)`` pairs and pumps it once."""
    script = Funscript(frame_time_provider=lambda: frame_time_ms)
    for at, pos in points:
        script.add_action(FunscriptAction(at, pos))
    script.update()
    return script


def positions(script):
    return [action.pos for action in script.actions]


def times(script):
    return [action.at for action in script.actions]


@pytest.fixture
def script():
    return make_script([(0, 0), (100, 100), (200, 0), (300, 100), (400, 0)])
