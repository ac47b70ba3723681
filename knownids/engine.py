"""
Time synchronized one-time codes, using the conventions of Google
Authenticator: HMAC-SHA1, 30 second steps, 6 digits.
"""
import base64
import binascii
import hashlib
import hmac
import struct
import time
import urllib.parse
from datetime import datetime
from typing import Union

from knownids.errors import InvalidEncoding

TIME_STEP    = 30
DIGITS       = 6
SECRET_BYTES = 10

_MODULUS     = 10 ** DIGITS
_INT64_MIN   = -(1 << 63)
_INT64_MAX   = (1 << 63) - 1


def decode_secret(key: str) -> bytes:
    """
    Decode a standard (RFC 4648, uppercase, padded) base32 key.
    Raises InvalidEncoding if the key does not decode.
    """
    try:
        return base64.b32decode(key)
    except (binascii.Error, ValueError, TypeError) as err:
        raise InvalidEncoding(f"key is not valid base32: {err}") from err


def encode_secret(raw: bytes) -> str:
    return base64.b32encode(raw).decode('ascii')


def time_counter(when: Union[None, float, datetime] = None) -> int:
    """
    Number of 30 second steps since the Unix epoch for `when`
    (seconds or a datetime), defaulting to now.
    """
    if when is None:
        when = time.time()
    elif isinstance(when, datetime):
        when = when.timestamp()
    return int(when // TIME_STEP)


def derive(secret: bytes, counter: int) -> int:
    # https://www.rfc-editor.org/rfc/rfc4226#section-5.3
    if not _INT64_MIN <= counter <= _INT64_MAX:
        raise ValueError(f"counter {counter} does not fit in 64 bits")
    # Pack counter value in 8-byte big-endian format.
    counter_bytes  = struct.pack(">q", counter)
    hmac_hash      = hmac.new(secret, counter_bytes, hashlib.sha1).digest()
    # Dynamic truncation: the last nibble selects a 4-byte window.
    offset         = hmac_hash[-1] & 0x0F
    truncated_hash = hmac_hash[offset:offset + 4]
    if len(truncated_hash) != 4:
        raise ValueError(f"digest of {len(hmac_hash)} bytes too short for offset {offset}")
    # Unsigned 32-bit read, no top bit masking.
    code           = struct.unpack(">I", truncated_hash)[0]
    return code % _MODULUS


def format_code(code: int) -> str:
    """Render a code as two groups of three digits, e.g. "012 345"."""
    digits = str(code).zfill(DIGITS)
    return f"{digits[:3]} {digits[3:]}"


def provisioning_uri(issuer: str, identity: str, key: str) -> str:
    """
    URI for authenticator apps. The key is embedded verbatim,
    issuer and identity are query escaped.
    """
    org = urllib.parse.quote_plus(issuer)
    uid = urllib.parse.quote_plus(identity)
    return f"otpauth://totp/{org}:{uid}?secret={key}&issuer={org}"
