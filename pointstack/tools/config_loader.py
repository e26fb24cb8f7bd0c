"""
Configuration loader for stacking profiles and environment variables.
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional
import yaml

from ..process import StackerConfig


class ConfigLoader:
    """Load and manage stacking profiles from YAML files and environment."""

    CONFIG_DIR = Path(__file__).parent.parent.parent / "configs"
    DEFAULT_PROFILE = "default"
    ENV_VAR = "STACKER_PROFILE"

    @classmethod
    def available_profiles(cls) -> list:
        return sorted(f.stem for f in cls.CONFIG_DIR.glob("*.yaml"))

    @classmethod
    def load_profile(cls, profile_name: str = DEFAULT_PROFILE) -> Dict[str, Any]:
        """
        Load a stacking profile.

        Args:
            profile_name: Name of the profile (default, dense-map, by-attribute)

        Returns:
            Dictionary of stacking parameters

        Raises:
            FileNotFoundError: If profile doesn't exist
        """
        profile_path = cls.CONFIG_DIR / f"{profile_name}.yaml"

        if not profile_path.exists():
            available = cls.available_profiles()
            raise FileNotFoundError(
                f"Profile '{profile_name}' not found. Available profiles: {', '.join(available)}"
            )

        with open(profile_path, "r") as f:
            data = yaml.safe_load(f) or {}
        return data.get("stacking", data)

    @classmethod
    def get_profile_from_env(cls) -> Optional[str]:
        """Get profile name from STACKER_PROFILE environment variable."""
        return os.getenv(cls.ENV_VAR)

    @classmethod
    def load_default_or_env_profile(cls) -> Dict[str, Any]:
        """
        Load profile from environment variable or use the default profile.

        Returns:
            Dictionary of stacking parameters
        """
        profile = cls.get_profile_from_env() or cls.DEFAULT_PROFILE
        return cls.load_profile(profile)

    @classmethod
    def build_config(
        cls,
        profile_name: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> StackerConfig:
        """
        Build a :class:`StackerConfig` from a profile plus explicit overrides.

        Overrides set to ``None`` keep the profile value.
        """
        if profile_name:
            params = dict(cls.load_profile(profile_name))
        else:
            params = dict(cls.load_default_or_env_profile())
        for key, value in (overrides or {}).items():
            if value is not None:
                params[key] = value
        return StackerConfig.from_mapping(params)


def get_config() -> Dict[str, Any]:
    """Convenience function to get current configuration."""
    return ConfigLoader.load_default_or_env_profile()
