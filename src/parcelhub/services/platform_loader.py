"""Service for loading platform profiles."""

import logging
from pathlib import Path

from parcelhub.config import settings
from parcelhub.db.models import Platform
from parcelhub.errors import ValidationError
from parcelhub.platforms.base import PlatformProfile

logger = logging.getLogger(__name__)


class PlatformRegistry:
    """Loads platform profiles from the platforms directory."""

    def __init__(self, platforms_dir: Path | None = None):
        self.platforms_dir = platforms_dir or settings.platforms_dir
        self._profiles: dict[Platform, PlatformProfile] = {}

    def load_all(self) -> dict[Platform, PlatformProfile]:
        """Load every platform.yaml below the platforms directory."""
        if self._profiles:
            return self._profiles

        for platform_dir in sorted(self.platforms_dir.iterdir()):
            if not platform_dir.is_dir():
                continue
            if platform_dir.name.startswith("_") or platform_dir.name.startswith("."):
                continue

            self._load_profile(platform_dir)

        missing = [p.value for p in Platform if p not in self._profiles]
        if missing:
            raise RuntimeError(
                f"No platform profile for {', '.join(missing)} in {self.platforms_dir}"
            )

        return self._profiles

    def _load_profile(self, platform_dir: Path) -> None:
        config_path = platform_dir / "platform.yaml"

        if not config_path.exists():
            logger.debug("Skipping %s: no platform.yaml", platform_dir.name)
            return

        profile = PlatformProfile.from_yaml(config_path)
        self._profiles[profile.id] = profile
        logger.info("Loaded platform profile: %s", profile.name)

    def get(self, platform: Platform | str) -> PlatformProfile:
        """Get the profile for a platform, rejecting unknown names."""
        if not self._profiles:
            self.load_all()
        try:
            return self._profiles[Platform(platform)]
        except ValueError:
            raise ValidationError(
                f"Invalid platform {platform!r}. Must be one of: "
                + ", ".join(p.value for p in Platform)
            )

    def list_profiles(self) -> list[PlatformProfile]:
        if not self._profiles:
            self.load_all()
        return list(self._profiles.values())
