"""Build options and environment-driven defaults."""

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

POSITION_STRATEGIES = ("grid", "hierarchical")

DEFAULT_SPACING = 100.0


@dataclass(frozen=True)
class BuildOptions:
    assign_positions: bool = True
    position_strategy: str = "grid"
    spacing: float = DEFAULT_SPACING

    def __post_init__(self) -> None:
        if self.position_strategy not in POSITION_STRATEGIES:
            raise ValueError(
                f"Unknown position strategy: {self.position_strategy!r} "
                f"(expected one of {', '.join(POSITION_STRATEGIES)})"
            )
        if self.spacing <= 0:
            raise ValueError(f"Spacing must be positive, got {self.spacing}")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_build_options() -> BuildOptions:
    """Read layout defaults from the environment or a local .env file."""
    load_dotenv(find_dotenv(usecwd=True))
    spacing = os.getenv("IVM_LAYOUT_SPACING")
    return BuildOptions(
        assign_positions=_env_flag("IVM_ASSIGN_POSITIONS", True),
        position_strategy=os.getenv("IVM_POSITION_STRATEGY", "grid").strip().lower(),
        spacing=float(spacing) if spacing else DEFAULT_SPACING,
    )
