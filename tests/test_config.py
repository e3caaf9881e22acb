"""Unit tests for configuration manager."""

import json

import pytest

from planetary_registry.config import ConfigManager
from planetary_registry.models import Location


@pytest.fixture
def temp_config_path(tmp_path):
    """Create a temporary config file path."""
    return tmp_path / "nested" / "test_config.json"


@pytest.fixture(scope="function")
def config_manager(tmp_path):
    """Create a config manager with temporary path."""
    return ConfigManager(config_path=tmp_path / "config.json")


class TestConfigManager:
    """Test configuration management."""

    def test_creates_default_config(self, temp_config_path):
        """Default config is written when none exists."""
        manager = ConfigManager(config_path=temp_config_path)

        assert temp_config_path.exists()
        assert manager.config["house_system"] == "P"
        assert manager.config["weather"] == "Clear"
        assert manager.get_location() is None
        assert "thresholds" in manager.config

    def test_defaults_not_shared_between_instances(self, tmp_path):
        first = ConfigManager(config_path=tmp_path / "a.json")
        first.set_threshold("conjunction_orb", 3.0)
        second = ConfigManager(config_path=tmp_path / "b.json")
        assert second.get_threshold("conjunction_orb") == 8.0

    def test_loads_existing_config(self, temp_config_path):
        """Existing values are kept and missing keys filled from defaults."""
        temp_config_path.parent.mkdir(parents=True)
        with open(temp_config_path, "w") as f:
            json.dump({"house_system": "K", "thresholds": {"linear_tolerance": 10.0}}, f)

        manager = ConfigManager(config_path=temp_config_path)
        assert manager.get_house_system() == "K"
        assert manager.get_threshold("linear_tolerance") == 10.0
        assert manager.get_threshold("conjunction_orb") == 8.0
        assert manager.get_event_window_days() == 365

    def test_corrupt_file_raises(self, temp_config_path):
        temp_config_path.parent.mkdir(parents=True)
        temp_config_path.write_text("{not json")
        with pytest.raises(ValueError, match="Failed to load config"):
            ConfigManager(config_path=temp_config_path)


class TestLocation:
    def test_set_and_get(self, config_manager):
        location = config_manager.set_location(
            34.09, -118.41, name="Beverly Hills, CA", postal_code="90210",
            timezone="America/Los_Angeles",
        )
        assert isinstance(location, Location)
        assert config_manager.get_location() == location
        assert config_manager.is_configured()

    def test_persisted(self, config_manager):
        config_manager.set_location(51.5, -0.13, name="London")
        reloaded = ConfigManager(config_path=config_manager.config_path)
        assert reloaded.get_location().name == "London"
        assert reloaded.get_location().timezone is None

    def test_invalid_coordinates(self, config_manager):
        with pytest.raises(ValueError, match="Invalid latitude"):
            config_manager.set_location(91.0, 0.0)
        with pytest.raises(ValueError, match="Invalid longitude"):
            config_manager.set_location(0.0, 181.0)
        assert config_manager.get_location() is None


class TestHouseSystem:
    def test_set_by_code(self, config_manager):
        config_manager.set_house_system("w")
        assert config_manager.get_house_system() == "W"

    def test_set_by_name(self, config_manager):
        config_manager.set_house_system("Whole Sign")
        assert config_manager.get_house_system() == "W"
        config_manager.set_house_system("koch")
        assert config_manager.get_house_system() == "K"

    def test_invalid(self, config_manager):
        with pytest.raises(ValueError, match="Invalid house system"):
            config_manager.set_house_system("Z")


class TestWeather:
    def test_normalized(self, config_manager):
        config_manager.set_weather("thunderstorm")
        assert config_manager.get_weather() == "ThunderStorm"

    def test_clear_with_none(self, config_manager):
        config_manager.set_weather(None)
        assert config_manager.get_weather() is None

    def test_unknown(self, config_manager):
        with pytest.raises(ValueError, match="Unknown weather"):
            config_manager.set_weather("Hail")
        assert config_manager.get_weather() == "Clear"


class TestThresholds:
    def test_set_threshold(self, config_manager):
        config_manager.set_threshold("stellium_min_bodies", 4)
        assert config_manager.get_threshold("stellium_min_bodies") == 4

    def test_unknown_threshold(self, config_manager):
        with pytest.raises(ValueError, match="Unknown threshold"):
            config_manager.set_threshold("trine_orb", 6)

    def test_missing_threshold_is_none(self, config_manager):
        assert config_manager.get_threshold("nope") is None

    @pytest.mark.parametrize("name, value", [
        ("conjunction_orb", 0),
        ("opposition_orb", -2.0),
        ("linear_tolerance", 0.0),
        ("stellium_min_bodies", 1),
        ("stellium_min_bodies", 2.5),
        ("conjunction_orb", "8"),
    ])
    def test_invalid_threshold_rejected(self, config_manager, name, value):
        with pytest.raises(ValueError, match=name):
            config_manager.set_threshold(name, value)
        assert config_manager.get_threshold(name) == config_manager.DEFAULT_CONFIG["thresholds"][name]

    def test_invalid_threshold_in_file(self, tmp_path):
        path = tmp_path / "config.json"
        with open(path, "w") as f:
            json.dump({"thresholds": {"conjunction_orb": 0}}, f)
        with pytest.raises(ValueError, match="conjunction_orb must be greater than 0"):
            ConfigManager(config_path=path)


class TestConfigStatus:
    def test_unconfigured(self, config_manager):
        status = config_manager.get_config_status()
        assert status["configured"] is False
        assert status["location"] is None
        assert status["config_path"] == str(config_manager.config_path)

    def test_configured(self, config_manager):
        config_manager.set_location(34.09, -118.41, postal_code="90210")
        status = config_manager.get_config_status()
        assert status["configured"] is True
        assert status["location"] == "90210"
        assert status["thresholds"]["opposition_orb"] == 8.0
