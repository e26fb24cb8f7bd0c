"""
Tests for stacking profiles loaded from YAML.
"""

import pytest

from pointstack import ConfigurationError, PositionStrategy, PreserveLocation
from pointstack.tools.config_loader import ConfigLoader, get_config


@pytest.fixture(autouse=True)
def no_profile_env(monkeypatch):
    monkeypatch.delenv(ConfigLoader.ENV_VAR, raising=False)


class TestProfiles:
    """Test profile discovery and loading."""

    def test_available_profiles(self):
        profiles = ConfigLoader.available_profiles()
        assert {"default", "dense-map", "by-attribute"} <= set(profiles)

    def test_load_default(self):
        params = ConfigLoader.load_profile("default")
        assert params["clusterBasis"] == "grid"
        assert params["clusterSize"] == 40
        assert params["positionClusterPt"] == "Nearest"

    def test_unknown_profile(self):
        with pytest.raises(FileNotFoundError, match="Available profiles"):
            ConfigLoader.load_profile("missing")

    def test_env_profile(self, monkeypatch):
        monkeypatch.setenv(ConfigLoader.ENV_VAR, "dense-map")
        assert ConfigLoader.get_profile_from_env() == "dense-map"
        assert get_config()["positionClusterPt"] == "Average"

    def test_default_without_env(self):
        assert ConfigLoader.load_default_or_env_profile()["clusterSize"] == 40

    def test_custom_config_dir(self, tmp_path, monkeypatch):
        (tmp_path / "tiny.yaml").write_text("stacking:\n  clusterSize: 5\n")
        monkeypatch.setattr(ConfigLoader, "CONFIG_DIR", tmp_path)
        assert ConfigLoader.available_profiles() == ["tiny"]
        assert ConfigLoader.load_profile("tiny") == {"clusterSize": 5}


class TestBuildConfig:
    """Test building a StackerConfig from a profile and overrides."""

    def test_profile_values(self):
        config = ConfigLoader.build_config("dense-map")
        assert config.cluster_size == 80.0
        assert config.position is PositionStrategy.AVERAGE
        assert config.normalize is True
        assert config.preserve_location is PreserveLocation.SINGLE

    def test_attribute_profile(self):
        config = ConfigLoader.build_config("by-attribute")
        assert config.cluster_basis == "district"
        assert config.position is PositionStrategy.EXTENT

    def test_overrides_win(self):
        config = ConfigLoader.build_config(
            "default",
            {"clusterSize": 10, "positionClusterPt": "Weighted", "sortField": None},
        )
        assert config.cluster_size == 10.0
        assert config.position is PositionStrategy.WEIGHTED
        assert config.sort_field is None

    def test_env_profile_used_when_none_given(self, monkeypatch):
        monkeypatch.setenv(ConfigLoader.ENV_VAR, "by-attribute")
        assert ConfigLoader.build_config().cluster_basis == "district"

    def test_unknown_override(self):
        with pytest.raises(ConfigurationError):
            ConfigLoader.build_config("default", {"radius": 3})
