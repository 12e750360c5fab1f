"""Per-platform rules loaded from platform.yaml."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from parcelhub.db.models import CourierType, Platform


@dataclass
class PlatformProfile:
    """Configuration loaded from platform.yaml.

    Each marketplace carries its own tracking-number normalisation and
    default courier rates, so call sites ask the profile instead of
    branching on the platform name.
    """

    id: Platform
    name: str
    uppercase_tracking_numbers: bool = False
    source_label: str = "manual"
    default_rates: dict[CourierType, float] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "PlatformProfile":
        """Load a platform profile from a YAML file."""
        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        return cls(
            id=Platform(data["id"]),
            name=data["name"],
            uppercase_tracking_numbers=data.get("uppercase_tracking_numbers", False),
            source_label=data.get("source_label", "manual"),
            default_rates={
                CourierType(str(kind)): float(rate)
                for kind, rate in (data.get("default_rates") or {}).items()
            },
        )

    def normalise(self, tracking_number: str) -> str:
        """Trim a tracking number and apply the platform's case policy."""
        normalised = tracking_number.strip()
        if self.uppercase_tracking_numbers:
            normalised = normalised.upper()
        return normalised

    def default_rate(self, courier_type: CourierType) -> float | None:
        return self.default_rates.get(courier_type)
