# steps/keys.py
# Steps 4 and 5: SPSDK environment and the SRK key set.
from __future__ import annotations

from ..deps import module
from ..errors import ExternalToolError
from ..model import PipelineConfig, Step
from ..providers.signing import srkh_fuse_words
from .context import StepContext

SRK_CURVE = "secp384r1"
SRK_COUNT = 4
SRK_PRIVATE_KEYS = tuple(f"keys/srk{i}.pem" for i in range(SRK_COUNT))
SRK_PUBLIC_KEYS = tuple(f"keys/srk{i}.pub" for i in range(SRK_COUNT))
# only srk0 signs; the others just populate the SRK table
SRK_PRIVATE = SRK_PRIVATE_KEYS[0]
SIGNING_KEYS = (SRK_PRIVATE,) + SRK_PUBLIC_KEYS

SRK_TABLE = "srk_table.bin"


def setup_spsdk(ctx: StepContext) -> None:
    ctx.signing.prepare(upgrade=True)


def generate_keys(ctx: StepContext) -> None:
    ws = ctx.workspace
    ctx.signing.prepare(upgrade=False)

    ctx.console.header("Generate ECC-384 keys (SRK set)")
    pairs = [ctx.signing.generate_key_pair(SRK_CURVE, ws.path(priv)) for priv in SRK_PRIVATE_KEYS]

    for priv, pub in pairs:
        if not ctx.signing.verify_key_pair(priv, pub):
            raise ExternalToolError("nxpcrypto", f"Key verification failed for {ws.relative(priv)}")

    ctx.console.header("Compute SRK table + SRKH fuse values")
    digest = ctx.signing.compute_srk_table([ws.path(p) for p in SRK_PUBLIC_KEYS], ws.path(SRK_TABLE))
    ctx.console.info(f"SRK hash: {digest.hex()}")
    ctx.console.info("SRKH fuse values (OTP 128-135):")
    for i, word in enumerate(srkh_fuse_words(digest)):
        ctx.console.line(f"SRKH[{i}] = 0x{word:08X}")


def skip_keygen(config: PipelineConfig) -> bool:
    return config.skip_keygen


SPSDK_STEP = Step(
    id=4,
    name="spsdk",
    title="Setup SPSDK venv/tools",
    flag="spsdk",
    action=setup_spsdk,
    tools=(module("venv"),),
)

KEYS_STEP = Step(
    id=5,
    name="keys",
    title="Generate & verify keys + Compute SRK Table",
    flag="keys",
    action=generate_keys,
    produces=SRK_PRIVATE_KEYS + SRK_PUBLIC_KEYS + (SRK_TABLE,),
    skip_when=skip_keygen,
)
