"""Format checks for the identifier URN schemes used in vault metadata."""

import re

BAG_ID_PREFIX = "urn:uuid:"
NBN_PREFIX = "urn:nbn:nl:ui:13-"

_UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def _has_uuid_suffix(value: str | None, prefix: str) -> bool:
    if not value:
        return False
    if not value.lower().startswith(prefix):
        return False
    return _UUID_PATTERN.fullmatch(value[len(prefix):]) is not None


class IdValidator:
    """Checks bag ids (urn:uuid) and NBNs (urn:nbn:nl:ui:13-).

    The prefix is matched case-insensitively; what follows must be exactly
    one UUID in canonical hyphenated form.
    """

    def is_valid_bag_id(self, value: str | None) -> bool:
        return _has_uuid_suffix(value, BAG_ID_PREFIX)

    def is_valid_nbn(self, value: str | None) -> bool:
        return _has_uuid_suffix(value, NBN_PREFIX)
