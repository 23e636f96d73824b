from .base import FirmwareProvider, SigningProvider, ToolchainProvider
from .firmware import EulaFirmwareFetcher
from .process import run_command
from .signing import SpsdkSigningProvider, srkh_fuse_words
from .toolchain import GitMakeToolchain

__all__ = [
    "FirmwareProvider",
    "SigningProvider",
    "ToolchainProvider",
    "EulaFirmwareFetcher",
    "GitMakeToolchain",
    "SpsdkSigningProvider",
    "run_command",
    "srkh_fuse_words",
]
