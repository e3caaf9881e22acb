"""Configuration management for planetary-registry-mcp."""

import copy
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

from .constants import HOUSE_SYSTEM_CODES, HOUSE_SYSTEM_NAMES
from .models import Location
from .utils.elemental import normalize_weather

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration for registry calculations."""

    # Default config location
    DEFAULT_CONFIG_DIR = Path.home() / ".config" / "planetary-registry"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

    # Default configuration
    DEFAULT_CONFIG = {
        "location": None,
        "house_system": "P",  # Placidus
        "weather": "Clear",
        "event_window_days": 365,
        "thresholds": {
            "conjunction_orb": 8.0,
            "opposition_orb": 8.0,
            "linear_tolerance": 15.0,
            "stellium_min_bodies": 3
        }
    }

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Optional custom config file path
        """
        self.config_path = Path(config_path) if config_path else self.DEFAULT_CONFIG_FILE
        self.config = self._load_or_create()

    def _load_or_create(self) -> Dict[str, Any]:
        """Load existing config or create default."""
        if self.config_path.exists():
            return self._load()
        # Create directory if needed
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        config = copy.deepcopy(self.DEFAULT_CONFIG)
        self._save(config)
        logger.info("Created default config at %s", self.config_path)
        return config

    def _load(self) -> Dict[str, Any]:
        """Load config from file."""
        try:
            with open(self.config_path, 'r') as f:
                config = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ValueError(f"Failed to load config from {self.config_path}: {e}")

        # Merge with defaults (in case new keys were added)
        merged = copy.deepcopy(self.DEFAULT_CONFIG)
        thresholds = {**merged["thresholds"], **config.get("thresholds", {})}
        merged.update(config)
        merged["thresholds"] = thresholds
        for name, value in thresholds.items():
            if name in self.DEFAULT_CONFIG["thresholds"]:
                thresholds[name] = self._validate_threshold(name, value)
        return merged

    def _save(self, config: Dict[str, Any]) -> None:
        """Save config to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except IOError as e:
            raise ValueError(f"Failed to save config to {self.config_path}: {e}")

    def save(self) -> None:
        """Save current config to file."""
        self._save(self.config)

    # Location

    def get_location(self) -> Optional[Location]:
        """Get the configured location, or None if not set."""
        data = self.config.get("location")
        if not data:
            return None
        return Location(
            latitude=data["latitude"],
            longitude=data["longitude"],
            postal_code=data.get("postal_code"),
            name=data.get("name"),
            timezone=data.get("timezone"),
        )

    def set_location(
        self,
        latitude: float,
        longitude: float,
        name: Optional[str] = None,
        postal_code: Optional[str] = None,
        timezone: Optional[str] = None
    ) -> Location:
        """
        Set the location used when a tool call does not give one.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees
            name: Display name
            postal_code: Postal code the location was looked up from
            timezone: IANA timezone (resolved from coordinates when omitted)

        Raises:
            ValueError: If the coordinates are out of range.
        """
        location = Location(
            latitude=latitude,
            longitude=longitude,
            postal_code=postal_code,
            name=name,
            timezone=timezone,
        )
        self.config["location"] = location.to_dict()
        self.save()
        return location

    # House system

    def get_house_system(self) -> str:
        """Get house system code (e.g., 'P' for Placidus)."""
        return self.config.get("house_system", "P")

    def set_house_system(self, system: str) -> None:
        """
        Set house system.

        Args:
            system: House system code (P=Placidus, K=Koch, W=Whole Sign, etc.)
                or its name
        """
        by_name = {n.lower(): c for n, c in HOUSE_SYSTEM_CODES.items()}
        code = by_name.get(system.strip().lower(), system.strip().upper())
        if code not in HOUSE_SYSTEM_NAMES:
            raise ValueError(
                f"Invalid house system: {system}. Valid: {sorted(HOUSE_SYSTEM_NAMES)}"
            )

        self.config["house_system"] = code
        self.save()

    # Weather

    def get_weather(self) -> Optional[str]:
        return self.config.get("weather")

    def set_weather(self, weather: Optional[str]) -> None:
        """Set the default weather; None or "" clears it."""
        self.config["weather"] = normalize_weather(weather) if weather else None
        self.save()

    # Thresholds

    def get_threshold(self, name: str) -> Optional[Any]:
        """Get a specific threshold value."""
        return self.config.get("thresholds", {}).get(name)

    def set_threshold(self, name: str, value: Any) -> None:
        """Set a threshold value."""
        if name not in self.DEFAULT_CONFIG["thresholds"]:
            raise ValueError(
                f"Unknown threshold: {name}. Valid: {sorted(self.DEFAULT_CONFIG['thresholds'])}"
            )
        value = self._validate_threshold(name, value)
        if "thresholds" not in self.config:
            self.config["thresholds"] = {}

        self.config["thresholds"][name] = value
        self.save()

    @staticmethod
    def _validate_threshold(name: str, value: Any) -> Any:
        """
        Check a threshold value.

        Orbs and the linear tolerance must be positive degrees; a stellium
        needs at least two bodies.

        Raises:
            ValueError: If the value is not a number or is out of range.
        """
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Threshold {name} must be a number, got {value!r}")
        if name == "stellium_min_bodies":
            if value < 2 or value != int(value):
                raise ValueError(f"Threshold {name} must be a whole number of at least 2, got {value}")
            return int(value)
        if value <= 0:
            raise ValueError(f"Threshold {name} must be greater than 0, got {value}")
        return float(value)

    def get_event_window_days(self) -> int:
        return int(self.config.get("event_window_days", 365))

    # Validation

    def is_configured(self) -> bool:
        """Check if basic configuration is complete."""
        return self.get_location() is not None

    def get_config_status(self) -> Dict[str, Any]:
        """Get configuration status for display."""
        location = self.get_location()

        return {
            "configured": self.is_configured(),
            "location": location.label if location else None,
            "latitude": location.latitude if location else None,
            "longitude": location.longitude if location else None,
            "timezone": location.timezone if location else None,
            "house_system": self.get_house_system(),
            "weather": self.get_weather(),
            "event_window_days": self.get_event_window_days(),
            "thresholds": dict(self.config.get("thresholds", {})),
            "config_path": str(self.config_path)
        }
