"""
Configuration classes for yogurt.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .storage import read_config

# config.json key -> YogurtConfig field
_STORED_SETTINGS = {
    "default_language": "language",
    "default_tagger": "tagger",
    "rules_url": "rules_url",
    "rules_file": "rules_file",
    "max_moves_factor": "max_moves_factor",
}


@dataclass
class YogurtConfig:
    """Configuration for a yogurt pipeline."""
    language: str = "en"  # Selects the bundled rule table
    rules_file: Optional[Path] = None  # Custom JSON rule table, takes priority over language
    rules_url: Optional[str] = None  # Downloaded (and cached) rule table, used when no rules_file
    tagger: str = "unconfigured"
    tagger_options: Dict[str, Any] = field(default_factory=dict)
    max_moves_factor: int = 2  # Parser move ceiling is max_moves_factor * token count
    debug: bool = False

    def __post_init__(self) -> None:
        if self.rules_file is not None and not isinstance(self.rules_file, Path):
            self.rules_file = Path(self.rules_file)

    @classmethod
    def from_settings(cls, **overrides: Any) -> "YogurtConfig":
        """
        Build a config from defaults, then ``config.json``, then ``overrides``.

        Overrides that are ``None`` are ignored so argparse namespaces can be
        passed through unchanged.
        """
        values: Dict[str, Any] = {}
        stored = read_config()
        for key, attr in _STORED_SETTINGS.items():
            if stored.get(key) is not None:
                values[attr] = stored[key]
        known = {f.name for f in fields(cls)}
        for key, value in overrides.items():
            if key not in known:
                raise TypeError(f"unknown setting '{key}'")
            if value is not None:
                values[key] = value
        return cls(**values)
