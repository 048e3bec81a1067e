"""
Stellar Wallet Signature Verification

This module handles the cryptographic side of wallet authentication.

Authentication Flow:
1. Backend issues a challenge string -> modules.auth.challenge
2. Wallet signs the challenge bytes with its Ed25519 secret key
3. Frontend sends: wallet address, challenge, signature
4. Backend verifies: verify_signature()
   - Decodes the Ed25519 public key from the G... address (StrKey)
   - Verifies the signature over the exact challenge bytes

Stellar account addresses are StrKey encoded:
    base32( version_byte || ed25519_public_key || crc16_xmodem_le )
with version_byte = 6 << 3 ("G" prefix once base32 encoded).

The signature verification uses:
- ED25519 cryptography via the `cryptography` package
- stdlib base32 / CRC16 for the StrKey address format
"""

import base64
import binascii
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey


ACCOUNT_ID_VERSION_BYTE = 6 << 3
ADDRESS_LENGTH = 56
PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64

_ZERO_SIGNATURE = bytes(SIGNATURE_LENGTH)


def _crc16_xmodem(data: bytes) -> bytes:
    """Helper: CRC16-XModem checksum, little-endian as StrKey stores it."""
    return binascii.crc_hqx(data, 0).to_bytes(2, "little")


def encode_account_id(public_key: bytes) -> str:
    """
    Encode a raw Ed25519 public key as a Stellar account address (G...).

    Args:
        public_key: 32-byte Ed25519 public key

    Returns:
        56-character StrKey address

    Raises:
        ValueError: If the key is not 32 bytes
    """
    if len(public_key) != PUBLIC_KEY_LENGTH:
        raise ValueError("Ed25519 public key must be 32 bytes")
    payload = bytes([ACCOUNT_ID_VERSION_BYTE]) + public_key
    return base64.b32encode(payload + _crc16_xmodem(payload)).decode("ascii")


def decode_account_id(address: str) -> Optional[bytes]:
    """
    Decode a Stellar account address to its raw Ed25519 public key.

    Returns None if the address is not a well-formed account ID: wrong length,
    not upper-case base32, wrong version byte, or checksum mismatch.
    """
    if not isinstance(address, str) or len(address) != ADDRESS_LENGTH:
        return None
    try:
        raw = base64.b32decode(address.encode("ascii"))
    except (binascii.Error, ValueError, UnicodeEncodeError):
        return None

    payload, checksum = raw[:-2], raw[-2:]
    if len(payload) != 1 + PUBLIC_KEY_LENGTH or payload[0] != ACCOUNT_ID_VERSION_BYTE:
        return None
    if _crc16_xmodem(payload) != checksum:
        return None
    return payload[1:]


def is_valid_address(address: str) -> bool:
    """Structural and checksum validation of a Stellar account address."""
    return decode_account_id(address) is not None


def _decode_signature(signature: str) -> Optional[bytes]:
    """
    Helper: Decode a hex or base64 signature to 64 raw bytes.

    Wallets commonly return base64; a 128-char string is tried as hex first.
    """
    if not isinstance(signature, str):
        return None
    value = signature.strip()
    decoded: Optional[bytes] = None
    if len(value) == SIGNATURE_LENGTH * 2:
        try:
            decoded = bytes.fromhex(value)
        except ValueError:
            decoded = None
    if decoded is None:
        try:
            decoded = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            return None
    if len(decoded) != SIGNATURE_LENGTH:
        return None
    return decoded


def verify_signature(address: str, message: str, signature: str) -> bool:
    """
    Verify a wallet signature over a challenge string.

    The signed bytes are the UTF-8 encoding of `message` exactly as issued:
    no trimming, decoding or framing is applied, so no other string can
    verify in its place.

    Args:
        address: Stellar account address (G...) of the signer
        message: The challenge string that was signed
        signature: Ed25519 signature, base64 or hex encoded

    Returns:
        True if the signature is valid for this address and message.
        Never raises; any malformed input yields False.
    """
    public_key_bytes = decode_account_id(address)
    if public_key_bytes is None or not isinstance(message, str):
        return False

    signature_bytes = _decode_signature(signature)
    try:
        public_key = Ed25519PublicKey.from_public_bytes(public_key_bytes)
        # A malformed signature still goes through verify so both failure
        # paths do comparable work.
        public_key.verify(signature_bytes or _ZERO_SIGNATURE, message.encode("utf-8"))
    except (InvalidSignature, ValueError, UnicodeEncodeError):
        return False

    return signature_bytes is not None
