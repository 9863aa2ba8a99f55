"""Minting of new bag ids and NBNs."""

import uuid

from .validator import BAG_ID_PREFIX, NBN_PREFIX


class IdMintingService:
    """Mints identifiers from random (version 4) UUIDs."""

    def mint_bag_id(self) -> str:
        return f"{BAG_ID_PREFIX}{uuid.uuid4()}"

    def mint_nbn(self) -> str:
        return f"{NBN_PREFIX}{uuid.uuid4()}"
