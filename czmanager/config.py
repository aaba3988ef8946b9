"""Exchange configuration for czmanager."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from czmanager.utils.validation import validate_channel, validate_timeout

DEFAULT_TIMEOUT = 5.0


@dataclass
class ExchangeSettings:
    """
    Settings for talking to a device.

    Attributes:
        timeout: Seconds to wait for each response
        flush_before_send: Drop stale queued messages before each request
        sysex_only: Only queue SysEx messages from the input port
        channel: Zero-based MIDI channel used in request frames
        input_port: Substring selecting the input port
        output_port: Substring selecting the output port
    """

    timeout: float = DEFAULT_TIMEOUT
    flush_before_send: bool = True
    sysex_only: bool = True
    channel: int = 0
    input_port: Optional[str] = None
    output_port: Optional[str] = None

    def __post_init__(self):
        validate_timeout(self.timeout)
        validate_channel(self.channel)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExchangeSettings":
        """Build settings from a dict, ignoring keys this class does not know."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ExchangeSettings":
        """
        Load settings from a JSON file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValidationError: If a value is out of range
        """
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def merged(self, **overrides: Any) -> "ExchangeSettings":
        """Return a copy with every non-None override applied."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ExchangeSettings.from_dict(data)
