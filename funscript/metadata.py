from dataclasses import dataclass, field, fields
from typing import Dict, Any, List

from config.constants import DEFAULT_METADATA_TYPE


@dataclass
class FunscriptMetadata:
    """Descriptive ``metadata`` block of a funscript document."""
    type: str = DEFAULT_METADATA_TYPE
    title: str = ""
    creator: str = ""
    script_url: str = ""
    video_url: str = ""
    tags: List[str] = field(default_factory=list)
    performers: List[str] = field(default_factory=list)
    description: str = ""
    license: str = ""
    notes: str = ""
    duration: int = 0
    # Keys written by other tools, kept as-is
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FunscriptMetadata':
        metadata = cls()
        if not isinstance(data, dict):
            return metadata
        known = {f.name: f for f in fields(cls) if f.name != "extra"}
        for key, value in data.items():
            if key not in known:
                metadata.extra[key] = value
                continue
            default = getattr(metadata, key)
            # Values of the wrong shape fall back to the default instead of poisoning the model.
            if isinstance(default, list):
                if isinstance(value, list):
                    setattr(metadata, key, [str(v) for v in value])
            elif isinstance(default, int):
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    setattr(metadata, key, int(value))
            elif isinstance(value, str):
                setattr(metadata, key, value)
        return metadata

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            data[f.name] = list(value) if isinstance(value, list) else value
        return data
