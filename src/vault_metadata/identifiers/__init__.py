"""Identifier minting and validation."""

from .minting import IdMintingService
from .validator import BAG_ID_PREFIX, NBN_PREFIX, IdValidator

__all__ = ["BAG_ID_PREFIX", "IdMintingService", "IdValidator", "NBN_PREFIX"]
