"""Block identifier generation for lessonchat."""

import uuid


def generate_block_id() -> str:
    """
    Generate a fresh opaque block identifier.

    Ids are ephemeral: they only need to be unique within one document and
    stable for as long as the block lives in an editing session. A random
    UUID v4 hex is used so ids minted by a re-parse can never collide with
    ids adopted from an earlier parse.

    Returns:
        32-character hex string

    Example:
        >>> generate_block_id()
        "f47ac10b58cc4372a5670e02b2c3d479"
    """
    return uuid.uuid4().hex
