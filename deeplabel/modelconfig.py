"""Detector model file selection and validation of Darknet network configs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .dataset import StrPath
from .detection import ModelFramework, Target

log = logging.getLogger(__name__)

_NET_SECTION = "net"
_REQUIRED_KEYS = ("width", "height", "channels")


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def _net_section(path: StrPath) -> dict[str, str]:
    """Return the key/value pairs of the first ``[net]`` section of an INI-style file."""
    values: dict[str, str] = {}
    in_net = False
    seen_net = False
    with open(path, encoding="utf-8", errors="replace") as fh:
        for raw in fh:
            line = raw.strip()
            if not line or line[0] in "#;":
                continue
            if line.startswith("[") and line.endswith("]"):
                name = line[1:-1].strip()
                if in_net:
                    break
                in_net = name == _NET_SECTION and not seen_net
                seen_net = seen_net or in_net
                continue
            if in_net and "=" in line:
                key, value = line.split("=", 1)
                values.setdefault(key.strip(), value.strip())
    return values


def read_darknet_config(path: StrPath) -> tuple[int, int, int]:
    """Return (width, height, channels) from the ``[net]`` section of a Darknet config.

    Raises ValueError when a parameter is missing or not a positive integer.
    """
    section = _net_section(path)
    for key in _REQUIRED_KEYS:
        if key not in section:
            raise ValueError(f"No {key} parameter")
    width, height, channels = (_to_int(section[key]) for key in _REQUIRED_KEYS)
    if width <= 0 or height <= 0 or channels <= 0:
        raise ValueError(
            f"Invalid network size: {width}x{height} with {channels} channels"
        )
    return width, height, channels


@dataclass
class ModelConfig:
    """The files and input parameters that describe a detection model."""

    cfg_file: str = ""
    weight_file: str = ""
    names_file: str = ""
    width: int = 320
    height: int = 240
    channels: int = 3
    target: Target = Target.CPU
    framework: ModelFramework = ModelFramework.TENSORFLOW
    convert_grayscale: bool = True
    convert_depth: bool = True

    def check(self) -> bool:
        """Whether every model file is given and exists and the config is usable.

        For Darknet models the input size and channels are read from the config.
        """
        if not self.cfg_file or not self.weight_file or not self.names_file:
            return False

        if not Path(self.cfg_file).exists():
            log.debug("Config file doesn't exist")
            return False
        if not self._params_from_config():
            return False

        if not Path(self.weight_file).exists():
            log.debug("Weight file doesn't exist")
            return False
        if not Path(self.names_file).exists():
            log.debug("Names file doesn't exist")
            return False
        return True

    def _params_from_config(self) -> bool:
        log.debug("Checking config file")
        if self.framework != ModelFramework.DARKNET:
            return True
        try:
            self.width, self.height, self.channels = read_darknet_config(self.cfg_file)
        except (OSError, ValueError) as error:
            log.debug("%s", error)
            return False
        return True