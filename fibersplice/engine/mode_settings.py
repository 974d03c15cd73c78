"""Splice mode settings loaded from YAML."""

import os
import logging
import yaml
from pathlib import Path
from typing import Dict, List, Optional
from dataclasses import dataclass, field

from ..models.cable import (
    SpliceMode,
    GROUP_SIZES,
    DEFAULT_CAPACITIES,
)


logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "FIBERSPLICE_MODES"


@dataclass
class ModeSpec:
    """Per-mode cable conventions."""
    mode: SpliceMode
    group_size: int              # Strands per ribbon / pairs per binder
    default_capacity: int        # Capacity offered for new cables
    default_name_prefixes: Dict[str, str] = field(default_factory=dict)  # {Feed: "f", Distribution: "d"}


class ModeSettings:
    """Fiber and copper conventions loaded from YAML."""

    def __init__(self, settings_path: Optional[str] = None):
        """
        Initialize the settings.

        Args:
            settings_path: Path to YAML settings file. Defaults to the
                FIBERSPLICE_MODES environment variable, then the bundled
                config/modes.yaml
        """
        self.settings_path = settings_path or os.environ.get(SETTINGS_ENV_VAR) or self._get_default_settings_path()
        self.modes: Dict[SpliceMode, ModeSpec] = {}
        self._load_settings()

    def _get_default_settings_path(self) -> str:
        """Get default path to the bundled settings."""
        return str(Path(__file__).parent.parent / "config" / "modes.yaml")

    def _load_settings(self):
        """Load mode settings, falling back to built-in defaults."""
        self._load_defaults()

        try:
            with open(self.settings_path, 'r') as f:
                settings = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.debug("Mode settings %s not found, using defaults", self.settings_path)
            return

        for key, values in (settings.get('modes') or {}).items():
            mode = SpliceMode.parse(key)
            self.modes[mode] = self._parse_mode(mode, values or {})

    def _parse_mode(self, mode: SpliceMode, values: Dict) -> ModeSpec:
        """Overlay YAML values on the built-in defaults for a mode."""
        base = self.modes[mode]
        group_size = int(values.get('group_size', base.group_size))
        if group_size < 1:
            raise ValueError(f"{mode.value}: group_size must be positive, got {group_size}")

        return ModeSpec(
            mode=mode,
            group_size=group_size,
            default_capacity=int(values.get('default_capacity', base.default_capacity)),
            default_name_prefixes=dict(values.get('default_name_prefixes', base.default_name_prefixes)),
        )

    def _load_defaults(self):
        """Load hardcoded fiber and copper conventions."""
        prefixes = {'Feed': 'f', 'Distribution': 'd'}

        self.modes = {
            SpliceMode.FIBER: ModeSpec(
                mode=SpliceMode.FIBER,
                group_size=GROUP_SIZES[SpliceMode.FIBER],
                default_capacity=DEFAULT_CAPACITIES[SpliceMode.FIBER],
                default_name_prefixes=dict(prefixes),
            ),
            SpliceMode.COPPER: ModeSpec(
                mode=SpliceMode.COPPER,
                group_size=GROUP_SIZES[SpliceMode.COPPER],
                default_capacity=DEFAULT_CAPACITIES[SpliceMode.COPPER],
                default_name_prefixes=dict(prefixes),
            ),
        }

    def get(self, mode) -> ModeSpec:
        """Get the settings for a mode (enum or name)."""
        return self.modes[SpliceMode.parse(mode)]

    def group_size(self, mode) -> int:
        return self.get(mode).group_size

    def default_capacity(self, mode) -> int:
        return self.get(mode).default_capacity

    def default_cable_name(self, mode, role: str, existing_names: List[str]) -> str:
        """
        Suggest the next free cable name for a role, e.g. "f1", "d3".

        Args:
            mode: Splice mode
            role: "Feed" or "Distribution"
            existing_names: Names already used in the mode

        Returns:
            Lowest numbered name not in use (case-insensitive)
        """
        prefix = self.get(mode).default_name_prefixes.get(role, role[:1].lower())
        taken = {name.lower() for name in existing_names}
        number = 1
        while f"{prefix}{number}".lower() in taken:
            number += 1
        return f"{prefix}{number}"


# Singleton instance
_mode_settings: Optional[ModeSettings] = None


def get_mode_settings() -> ModeSettings:
    """Get singleton mode settings instance."""
    global _mode_settings
    if _mode_settings is None:
        _mode_settings = ModeSettings()
    return _mode_settings
