"""Nostr public identifier handling for dmchecker.

Converts human-readable ``npub1...`` addresses to the 64-character hex
form relays use in filters, and validates caller-supplied identities at
the boundary before any relay connection is attempted.

Warning:
    [decode_npub()][dmchecker.utils.keys.decode_npub] is best-effort: the
    six trailing checksum symbols are discarded without verification, so a
    mistyped address decodes to a different (wrong) key instead of
    failing. Only the alphabet and the prefix are checked. Encoding goes
    through nostr-sdk and always produces a checksummed address.

Examples:
    ```python
    decode_npub("npub180cvv07tjdrrgpa0j7j7tmnyl2yr6yr7l8j4s3evf6u64th6gkwsyjh6w6")
    # '3bf0c63fcb93463407af97a5e5ee64fa883d107ef9e558472c4eb9aaaefa459d'

    normalize_identity("  3BF0C63F...459D ")   # lower-cased hex
    ```
"""

from __future__ import annotations

import re

from nostr_sdk import NostrSdkError, PublicKey

from dmchecker.core.exceptions import InvalidCharacterError, InvalidFormatError
from dmchecker.models.constants import PUBKEY_HEX_LENGTH


NPUB_PREFIX = "npub1"
_CHECKSUM_LENGTH = 6

BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_CHARSET_INDEX = {char: index for index, char in enumerate(BECH32_CHARSET)}

_HEX_PUBKEY = re.compile(rf"[0-9a-f]{{{PUBKEY_HEX_LENGTH}}}")


def decode_npub(address: str) -> str:
    """Decode an ``npub1`` address into lowercase hex without checksum validation.

    Each symbol after the prefix maps to a 5-bit value. The last six values
    (the checksum) are dropped, the rest are packed big-endian into bytes
    and any trailing partial bits are discarded.

    Args:
        address: Address starting with ``npub1``.

    Returns:
        Lowercase hex string of the decoded bytes.

    Raises:
        InvalidFormatError: If ``address`` does not start with ``npub1``.
        InvalidCharacterError: If a symbol is outside the bech32 alphabet.
    """
    if not address.startswith(NPUB_PREFIX):
        raise InvalidFormatError("Invalid npub: must start with npub1")

    data = address[len(NPUB_PREFIX) :].lower()
    words: list[int] = []
    for offset, char in enumerate(data):
        value = _CHARSET_INDEX.get(char)
        if value is None:
            raise InvalidCharacterError(char, len(NPUB_PREFIX) + offset)
        words.append(value)

    payload = words[:-_CHECKSUM_LENGTH] if len(words) > _CHECKSUM_LENGTH else []
    return bytes(_convert_bits(payload, 5, 8)).hex()


def encode_npub(pubkey_hex: str) -> str:
    """Encode a hex public key as a checksummed ``npub1`` address.

    Raises:
        InvalidFormatError: If ``pubkey_hex`` is not a valid public key.
    """
    try:
        return PublicKey.parse(pubkey_hex).to_bech32()
    except NostrSdkError as e:
        raise InvalidFormatError(f"Invalid hex public key: {pubkey_hex!r}") from e


def normalize_identity(value: str) -> str:
    """Validate a caller-supplied identity and return its 64-char hex form.

    Accepts a 64-character hex key (either case) or an ``npub1`` address.

    Raises:
        InvalidFormatError: If the value is empty, or neither form yields a
            64-character hex key.
        InvalidCharacterError: If an ``npub1`` address has a bad symbol.
    """
    candidate = value.strip()
    if not candidate:
        raise InvalidFormatError("Public key is empty")

    if candidate.startswith(NPUB_PREFIX):
        candidate = decode_npub(candidate)

    candidate = candidate.lower()
    if not _HEX_PUBKEY.fullmatch(candidate):
        raise InvalidFormatError(
            "Invalid public key format: expected a 64-character hex key or an npub1 address"
        )
    return candidate


def _convert_bits(data: list[int], from_bits: int, to_bits: int) -> list[int]:
    """Regroup a sequence of ``from_bits``-wide values into ``to_bits``-wide values."""
    acc = 0
    bits = 0
    out: list[int] = []
    mask = (1 << to_bits) - 1
    for value in data:
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & mask)
    return out
