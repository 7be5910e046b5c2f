"""Conversion options for height-to-normal map conversion.

Options are validated once when constructed and then passed read-only into
the converter. They can also be loaded from a YAML preset file:

```yaml
xyz: agb
scale: 2.0
wrap: true
tilesize: 64
```
"""

import logging
import math
from dataclasses import asdict, dataclass, fields, replace as dataclass_replace
from pathlib import Path
from typing import Any, Mapping, Union

logger = logging.getLogger(__name__)

# Output byte offset of each channel letter
CHANNEL_OFFSETS = {"r": 0, "g": 1, "b": 2, "a": 3}

DEFAULT_CHANNEL_MAPPING = "rgb"

# Trackmania expects X in alpha and Z in blue
TRACKMANIA_MAPPING = "agb"

# Alternative key names accepted in preset files
OPTION_ALIASES = {
    "xyz": "channel_mapping",
    "tilesize": "tile_size",
    "unsigned": "unsigned_z",
    "normalize": "normalise",
}


class OptionsError(Exception):
    """Raised when conversion options are invalid."""

    pass


def validate_channel_mapping(mapping: str) -> str:
    """Validate a channel mapping and return it in lower case.

    Args:
        mapping: Three letters from "rgba" giving the output channels of the
            X, Y and Z axes, e.g. "rgb" or "agb".

    Returns:
        The lower-cased mapping.

    Raises:
        OptionsError: If the mapping is not three distinct letters from "rgba".
    """
    if not isinstance(mapping, str) or len(mapping) != 3:
        raise OptionsError(f"Bad value for channel mapping: {mapping!r}")

    lowered = mapping.lower()
    if any(c not in CHANNEL_OFFSETS for c in lowered):
        raise OptionsError(f"Bad value for channel mapping: {mapping!r}")
    if len(set(lowered)) != 3:
        raise OptionsError(f"Channel mapping must use distinct channels: {mapping!r}")

    return lowered


@dataclass(frozen=True)
class ConversionOptions:
    """Settings for a single height field conversion.

    Attributes:
        channel_mapping: Output channels of the X, Y and Z axes.
        scale: Height-to-slope scale relative to one pixel.
        normalise: Multiply scale by the observed intensity range.
        unsigned_z: Store Z as unsigned 0-255 instead of signed 128-255.
        wrap: Sample across opposite tile edges for tileable textures.
        tile_size: Edge length of independently processed tiles; 0 for none.
        legacy_row_guard: Zero the row slope at tile column 1 instead of in
            single-column tiles, reproducing older normalmap output.
    """

    channel_mapping: str = DEFAULT_CHANNEL_MAPPING
    scale: float = 1.0
    normalise: bool = False
    unsigned_z: bool = False
    wrap: bool = False
    tile_size: int = 0
    legacy_row_guard: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "channel_mapping", validate_channel_mapping(self.channel_mapping)
        )

        if isinstance(self.scale, bool) or not isinstance(self.scale, (int, float)):
            raise OptionsError(f"Scale must be a number, got {self.scale!r}")
        if not (math.isfinite(self.scale) and self.scale > 0):
            raise OptionsError(f"Scale must be positive and finite, got {self.scale}")
        object.__setattr__(self, "scale", float(self.scale))

        if isinstance(self.tile_size, bool) or not isinstance(self.tile_size, int):
            raise OptionsError(f"Tile size must be an integer, got {self.tile_size!r}")
        if self.tile_size < 0:
            raise OptionsError(f"Tile size must not be negative, got {self.tile_size}")

    @property
    def channel_count(self) -> int:
        """Number of output channels, 4 when any axis maps to alpha."""
        return 4 if "a" in self.channel_mapping else 3

    @property
    def axis_offsets(self) -> tuple[int, int, int]:
        """Byte offsets of the X, Y and Z components within a pixel."""
        x, y, z = (CHANNEL_OFFSETS[c] for c in self.channel_mapping)
        return x, y, z

    def replace(self, **changes: Any) -> "ConversionOptions":
        """Return a validated copy with some fields changed."""
        return dataclass_replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ConversionOptions":
        """Create options from a dictionary of field names or aliases.

        Raises:
            OptionsError: If a key is unknown or a value is invalid.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                raise OptionsError(f"Unknown option: {key}")
            if name in kwargs:
                raise OptionsError(f"Option given more than once: {name}")
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def from_config_file(cls, config_path: Union[str, Path]) -> "ConversionOptions":
        """Create options from a YAML preset file.

        Args:
            config_path: Path to the YAML file.

        Returns:
            Validated ConversionOptions.

        Raises:
            OptionsError: If the file is not a YAML dictionary of valid options.
            FileNotFoundError: If the config file doesn't exist.
        """
        import yaml

        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with open(config_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise OptionsError(f"Invalid YAML in config file: {e}") from e

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise OptionsError("Config file must contain a YAML dictionary")

        logger.debug(f"Loaded {len(config)} options from {config_path}")
        return cls.from_mapping(config)
