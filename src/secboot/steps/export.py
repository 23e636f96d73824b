# steps/export.py
# Step 7: build both AHAB container sets, assemble the bootable image and
# verify it against the selected boot media.
from __future__ import annotations

from ..model import Artifact, Step
from .configs import (
    ATF_CONFIG,
    ATF_CONTAINER,
    BOOTABLE_CONFIG,
    CONFIG_FILES,
    FAMILY,
    REVISION,
    SPL_CONFIG,
    SPL_CONTAINER,
)
from .context import StepContext
from .keys import SIGNING_KEYS
from .stage import STAGED_INPUTS

# same file name for SD and eMMC images
SIGNED_IMAGE = "outputs/signed-sd-flash.bin"


def export_and_verify(ctx: StepContext) -> None:
    ws = ctx.workspace
    media = ctx.config.media.value
    ctx.signing.prepare(upgrade=False)

    ctx.console.header(f"nxpimage ahab export -> {SPL_CONTAINER}")
    ctx.signing.export_container(ws.path(SPL_CONFIG))

    ctx.console.header(f"nxpimage ahab export -> {ATF_CONTAINER}")
    ctx.signing.export_container(ws.path(ATF_CONFIG))

    ctx.console.header(f"nxpimage bootable-image export -> {SIGNED_IMAGE}")
    image = ctx.signing.export_bootable_image(ws.path(BOOTABLE_CONFIG), ws.path(SIGNED_IMAGE))

    for path in sorted(ws.outputs.rglob("*")):
        if path.is_file():
            ctx.console.line(f"{path.stat().st_size:>12}  {ws.relative(path)}")

    ctx.console.header(f"nxpimage bootable-image verify [media={media}]")
    ctx.signing.verify_bootable_image(image, FAMILY, REVISION, media)


EXPORT_STEP = Step(
    id=7,
    name="export",
    title="Export signed images + verify",
    flag="export",
    action=export_and_verify,
    requires=(
        tuple(Artifact(p, 6) for p in CONFIG_FILES)
        + tuple(Artifact(p, 5) for p in SIGNING_KEYS)
        + tuple(Artifact(p, 3) for p in STAGED_INPUTS)
    ),
    produces=(SPL_CONTAINER, ATF_CONTAINER, SIGNED_IMAGE),
)
