"""Configuration Resolver: command tokens (and optional YAML) to a Configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import yaml
from pydantic import ValidationError

from .contracts import RESOLUTION_TIERS, Configuration
from .errors import HelpRequested, InvalidArgument

logger = logging.getLogger(__name__)

USAGE = """
\t       Arguments of the function 'pdflow run'
==============================================================

 --help: Shows this menu...

 --rows r: Number of rows at the finest level of the pyramid.
\t   Options: r=15, r=30, r=60, r=120, r=240, r=480 (if VGA)
 --i1 <filename> : The first RGB image file name. Defaults to i1.png
 --i2 <filename> : The second RGB image file name. Defaults to i2.png
 --idir <dirname>: The directory containing RGB images. Defaults to None (not used)
 --z1 <filename> : The first depth image file name. Defaults to z1.png
 --z2 <filename> : The second depth image file name. Defaults to z2.png
 --zdir <dirname>: The directory containing depth images. Defaults to None (not used)
 --out <filename>: The output file name root. Omit file extension. Defaults to pdflow
 --no-show       : Don't show the output results. Useful for batch processing
"""

# flag -> Configuration field
_VALUE_FLAGS: dict[str, str] = {
    "--i1": "intensity_1",
    "--i2": "intensity_2",
    "--idir": "intensity_dir",
    "--z1": "depth_1",
    "--z2": "depth_2",
    "--zdir": "depth_dir",
    "--out": "output_root",
}


def _parse_rows(value: str) -> int:
    # plain ASCII digits only: int() would also take "+240", " 240 " and "2_40"
    if not (value.isascii() and value.isdigit()):
        raise InvalidArgument(f"--rows expects an integer, got '{value}'", token=value)
    rows = int(value)
    if rows not in RESOLUTION_TIERS:
        raise InvalidArgument(
            f"--rows must be one of {', '.join(map(str, RESOLUTION_TIERS))}, got {rows}",
            token=value,
        )
    return rows


def resolve_configuration(
    tokens: Sequence[str], base: Configuration | None = None
) -> Configuration:
    """Turn a flat token list into a validated Configuration.

    Parsing stops at the first error. ``--help`` seen before any error raises
    HelpRequested. Values from ``base`` (if given) act as defaults.
    """
    updates: dict[str, object] = {}
    idx = 0
    while idx < len(tokens):
        token = tokens[idx]
        if token == "--help":
            raise HelpRequested()
        if token == "--rows":
            idx += 1
            if idx >= len(tokens):
                raise InvalidArgument("--rows requires a value", token=token)
            updates["rows"] = _parse_rows(tokens[idx])
        elif token in _VALUE_FLAGS:
            idx += 1
            if idx >= len(tokens):
                raise InvalidArgument(f"{token} requires a value", token=token)
            updates[_VALUE_FLAGS[token]] = tokens[idx]
        elif token == "--no-show":
            updates["no_show"] = True
        else:
            raise InvalidArgument(f"Unrecognized argument '{token}'", token=token)
        idx += 1

    fields = base.model_dump() if base is not None else {}
    fields.update(updates)
    try:
        config = Configuration(**fields)
    except ValidationError as e:
        raise InvalidArgument(str(e)) from e

    if (config.intensity_dir is None) != (config.depth_dir is None):
        logger.warning(
            "Only one of --idir/--zdir given; directory mode needs both, using explicit files"
        )
    return config


def load_configuration(config_path: Path) -> Configuration:
    """Load a YAML mapping into a Configuration (used as base for token overrides)."""
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise InvalidArgument(f"{config_path}: expected a mapping at top level")
    try:
        return Configuration(**raw)
    except ValidationError as e:
        raise InvalidArgument(f"{config_path}: {e}") from e
