# config.py
# Resolves defaults + environment + explicit arguments into a PipelineConfig.
# Pure: nothing here touches the filesystem.
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError
from .model import BoardVariant, BootMedia, PipelineConfig


DEFAULTS: Dict[str, Any] = {
    "workspace_root": "work",
    "board": "evk",
    "media": "sd",
    "skip_keygen": False,
    "pause": False,
    "log_file": None,
    "color": True,
    "debug": False,
    "ddr_url": "https://www.nxp.com/lgfiles/NMG/MAD/YOCTO/firmware-imx-8.21.bin",
    "ele_url": "https://www.nxp.com/lgfiles/NMG/MAD/YOCTO/firmware-sentinel-0.11.bin",
}

# env var -> config field
ENV_KEYS: Dict[str, str] = {
    "WORKDIR": "workspace_root",
    "BOARD_TARGET": "board",
    "BOOT_MEDIA": "media",
    "DDR_EULA_URL": "ddr_url",
    "ELE_EULA_URL": "ele_url",
    "LOG_FILE": "log_file",
    "PAUSE_BETWEEN_STEPS": "pause",
    "SKIP_KEYGEN": "skip_keygen",
}

BOARD_ALIASES: Dict[str, BoardVariant] = {
    "evk": BoardVariant.EVK,
    "imx93_11x11_evk": BoardVariant.EVK,
    "frdm": BoardVariant.FRDM,
    "imx93_11x11_frdm": BoardVariant.FRDM,
}

MEDIA_ALIASES: Dict[str, BootMedia] = {
    "sd": BootMedia.SD,
    "emmc": BootMedia.EMMC,
    "sd_emmc": BootMedia.EMMC,
}

DEFCONFIGS: Dict[BoardVariant, str] = {
    BoardVariant.EVK: "imx93_11x11_evk_defconfig",
    BoardVariant.FRDM: "imx93_11x11_frdm_defconfig",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def normalize_board(value: Any) -> BoardVariant:
    if isinstance(value, BoardVariant):
        return value
    key = str(value).strip().lower()
    if key not in BOARD_ALIASES:
        raise ConfigError(
            f"Invalid board target '{value}' (use: evk or frdm)",
            kind="invalid_variant",
            field_name="board",
            value=str(value),
        )
    return BOARD_ALIASES[key]


def normalize_media(value: Any) -> BootMedia:
    if isinstance(value, BootMedia):
        return value
    key = str(value).strip().lower()
    if key not in MEDIA_ALIASES:
        raise ConfigError(
            f"Invalid boot media '{value}' (use: sd or emmc)",
            kind="invalid_variant",
            field_name="media",
            value=str(value),
        )
    return MEDIA_ALIASES[key]


def _as_bool(field_name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    key = str(value).strip().lower()
    if key in _TRUE:
        return True
    if key in _FALSE:
        return False
    raise ConfigError(
        f"Invalid value '{value}' for {field_name} (use: 1/0, true/false, yes/no, on/off)",
        kind="invalid_flag",
        field_name=field_name,
        value=str(value),
    )


def defconfig_for(board: BoardVariant) -> str:
    return DEFCONFIGS[board]


def env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Pick the recognised keys out of an environment mapping."""
    out: Dict[str, Any] = {}
    for env_key, field_name in ENV_KEYS.items():
        if env_key in environ:
            out[field_name] = environ[env_key]
    # https://no-color.org: presence (any value) disables color
    if "NO_COLOR" in environ:
        out["color"] = False
    return out


def resolve(
    defaults: Mapping[str, Any],
    environ: Mapping[str, str],
    explicit: Mapping[str, Any],
) -> PipelineConfig:
    """
    Merge the three layers into a validated PipelineConfig.

    Precedence: explicit (non-None values) > environment > defaults.

    Raises:
        ConfigError: unknown board/media alias or malformed boolean
    """
    merged: Dict[str, Any] = dict(defaults)
    merged.update(env_overrides(environ))
    merged.update({k: v for k, v in explicit.items() if v is not None})

    log_file: Optional[Path] = None
    if merged.get("log_file"):
        log_file = Path(merged["log_file"]).expanduser()

    return PipelineConfig(
        workspace_root=Path(merged.get("workspace_root") or "work").expanduser(),
        board=normalize_board(merged.get("board", "evk")),
        media=normalize_media(merged.get("media", "sd")),
        skip_keygen=_as_bool("skip_keygen", merged.get("skip_keygen", False)),
        pause=_as_bool("pause", merged.get("pause", False)),
        log_file=log_file,
        color=_as_bool("color", merged.get("color", True)),
        debug=_as_bool("debug", merged.get("debug", False)),
        ddr_url=str(merged.get("ddr_url") or DEFAULTS["ddr_url"]),
        ele_url=str(merged.get("ele_url") or DEFAULTS["ele_url"]),
    )
