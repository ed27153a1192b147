from dataclasses import dataclass
from typing import Dict, Any

from config.constants import POSITION_MIN, POSITION_MAX


def clamp_position(pos: int) -> int:
    return max(POSITION_MIN, min(POSITION_MAX, int(pos)))


@dataclass(frozen=True)
class FunscriptAction:
    """
    A single timestamped position sample.

    Equality compares both ``at`` and ``pos``; ordering compares ``at`` only,
    so a sorted list of actions is ordered by time.
    """
    at: int
    pos: int

    def __lt__(self, other: 'FunscriptAction') -> bool:
        return self.at < other.at

    def to_dict(self) -> Dict[str, int]:
        return {"at": int(self.at), "pos": int(self.pos)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FunscriptAction':
        """
        Builds an action from a ``{"at": ms, "pos": val}`` entry.

        Raises:
            KeyError: If ``at`` or ``pos`` is missing
            ValueError, TypeError: If either value is not numeric
        """
        at, pos = data["at"], data["pos"]
        if isinstance(at, bool) or isinstance(pos, bool):
            raise TypeError("Boolean is not a valid action value")
        return cls(at=int(at), pos=int(pos))
