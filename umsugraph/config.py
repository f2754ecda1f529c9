"""Settings: group table, strength bounds and force constants."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .groups import DEFAULT_GROUP, DEFAULT_GROUPS, GroupTable
from .models import Group

CONFIG_FILENAME = "umsugraph.toml"

STRENGTH_MIN = 0.025
STRENGTH_MAX = 0.045


@dataclass(frozen=True)
class StrengthBounds:
    min: float = STRENGTH_MIN
    max: float = STRENGTH_MAX

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


@dataclass(frozen=True)
class Forces:
    """Constants handed to the external force layout."""

    link_distance: float = 150.0
    link_strength: float = 2.1
    charge_strength: float = -700.0


@dataclass(frozen=True)
class Settings:
    groups: tuple[Group, ...] = DEFAULT_GROUPS
    default_group: Group = DEFAULT_GROUP
    strength: StrengthBounds = field(default_factory=StrengthBounds)
    forces: Forces = field(default_factory=Forces)

    def group_table(self) -> GroupTable:
        return GroupTable(self.groups, default=self.default_group)


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _number(value: Any, *, name: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number")
    return float(value)


def _radius(value: Any, *, name: str) -> float | None:
    if value is None:
        return None
    radius = _number(value, name=name, default=1.0)
    if radius <= 0:
        raise ValueError(f"{name} must be positive")
    return radius


def _colour(value: Any, *, name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string")
    return value.strip()


def _parse_groups(raw_groups: Any) -> tuple[Group, ...]:
    if not isinstance(raw_groups, list):
        raise ValueError("groups must be an array of tables")

    groups: list[Group] = []
    for idx, raw in enumerate(raw_groups):
        if not isinstance(raw, dict):
            raise ValueError(f"groups[{idx}] must be a table")
        tag = str(raw.get("tag", "")).strip()
        if not tag:
            raise ValueError(f"groups[{idx}].tag is required")
        groups.append(
            Group(
                tag=tag,
                colour=_colour(raw.get("colour"), name=f"groups[{idx}].colour"),
                radius=_radius(raw.get("radius"), name=f"groups[{idx}].radius"),
            )
        )
    return tuple(groups)


def parse_settings(data: dict[str, Any]) -> Settings:
    """Build settings from a decoded TOML document; absent sections keep defaults."""
    strength_raw = _coerce_dict(data.get("strength"))
    strength = StrengthBounds(
        min=_number(strength_raw.get("min"), name="strength.min", default=STRENGTH_MIN),
        max=_number(strength_raw.get("max"), name="strength.max", default=STRENGTH_MAX),
    )
    if strength.min > strength.max:
        raise ValueError("strength.min must not exceed strength.max")

    forces_raw = _coerce_dict(data.get("forces"))
    defaults = Forces()
    forces = Forces(
        link_distance=_number(forces_raw.get("link_distance"), name="forces.link_distance", default=defaults.link_distance),
        link_strength=_number(forces_raw.get("link_strength"), name="forces.link_strength", default=defaults.link_strength),
        charge_strength=_number(
            forces_raw.get("charge_strength"), name="forces.charge_strength", default=defaults.charge_strength
        ),
    )

    default_raw = _coerce_dict(data.get("default_group"))
    default_group = Group(
        tag=DEFAULT_GROUP.tag,
        colour=_colour(default_raw.get("colour"), name="default_group.colour") or DEFAULT_GROUP.colour,
        radius=_radius(default_raw.get("radius"), name="default_group.radius") or DEFAULT_GROUP.radius,
    )

    groups = _parse_groups(data["groups"]) if "groups" in data else DEFAULT_GROUPS

    return Settings(groups=groups, default_group=default_group, strength=strength, forces=forces)


def load_settings(path: Path | None) -> Settings:
    """Load settings from TOML. None means built-in defaults."""
    if path is None:
        return Settings()

    import tomllib

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    return parse_settings(data)


def find_config(start: Path) -> Path | None:
    """Find umsugraph.toml by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
