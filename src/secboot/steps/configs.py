# steps/configs.py
# Step 6: the declarative nxpimage configs for the two AHAB container sets
# and the final bootable image.
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from ..model import BootMedia, Step
from .context import StepContext
from .keys import SRK_PRIVATE, SRK_PUBLIC_KEYS

FAMILY = "mimx9352"
REVISION = "a1"
TARGET_MEMORY = "sd_emmc"

SPL_CONFIG = "inputs/u-boot-spl-container-img_config.yaml"
ATF_CONFIG = "inputs/u-boot-atf-container-img_config.yaml"
BOOTABLE_CONFIG = "inputs/u-boot-bootable.yaml"
CONFIG_FILES = (SPL_CONFIG, ATF_CONFIG, BOOTABLE_CONFIG)

SPL_CONTAINER = "outputs/spl_img/u-boot-spl-container.img"
ATF_CONTAINER = "outputs/atf_img/u-boot-atf-container.img"


def _signed_container(images: list) -> Dict[str, Any]:
    return {
        "container": {
            "srk_set": "oem",
            "used_srk_id": 0,
            "signer": f"type=file;file_path={SRK_PRIVATE}",
            "images": images,
            "srk_table": {"srk_array": list(SRK_PUBLIC_KEYS)},
        }
    }


def spl_container_config() -> Dict[str, Any]:
    return {
        "family": FAMILY,
        "revision": REVISION,
        "target_memory": TARGET_MEMORY,
        # nxpimage resolves output relative to the config file (inputs/)
        "output": f"../{SPL_CONTAINER}",
        "containers": [
            {"binary_container": {"path": "inputs/mx93a1-ahab-container.img"}},
            _signed_container([
                {
                    "lpddr_imem_1d": "inputs/lpddr4_imem_1d_v202201.bin",
                    "lpddr_imem_2d": "inputs/lpddr4_imem_2d_v202201.bin",
                    "lpddr_dmem_1d": "inputs/lpddr4_dmem_1d_v202201.bin",
                    "lpddr_dmem_2d": "inputs/lpddr4_dmem_2d_v202201.bin",
                    "spl_ddr": "inputs/u-boot-spl.bin",
                }
            ]),
        ],
    }


def atf_container_config() -> Dict[str, Any]:
    return {
        "family": FAMILY,
        "revision": REVISION,
        "target_memory": TARGET_MEMORY,
        "output": f"../{ATF_CONTAINER}",
        "containers": [
            _signed_container([
                {"atf": "inputs/bl31.bin"},
                {"uboot": "inputs/u-boot.bin"},
            ]),
        ],
    }


def bootable_image_config(media: BootMedia) -> Dict[str, Any]:
    return {
        "family": FAMILY,
        "revision": REVISION,
        "memory_type": media.value,
        "init_offset": 0,
        "primary_image_container_set": SPL_CONTAINER,
        "secondary_image_container_set": ATF_CONTAINER,
    }


def _write_yaml(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, default_flow_style=False)


def write_configs(ctx: StepContext) -> None:
    ws = ctx.workspace
    ws.subdir("outputs/spl_img")
    ws.subdir("outputs/atf_img")

    _write_yaml(ws.path(SPL_CONFIG), spl_container_config())
    _write_yaml(ws.path(ATF_CONFIG), atf_container_config())
    _write_yaml(ws.path(BOOTABLE_CONFIG), bootable_image_config(ctx.config.media))
    ctx.console.info(f"Wrote {BOOTABLE_CONFIG} with memory_type={ctx.config.media.value}")


YAML_STEP = Step(
    id=6,
    name="yaml",
    title="Write YAML configs [SD/eMMC]",
    flag="yaml",
    action=write_configs,
    produces=CONFIG_FILES,
)
