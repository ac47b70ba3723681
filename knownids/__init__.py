from knownids.engine import (
    DIGITS,
    SECRET_BYTES,
    TIME_STEP,
    decode_secret,
    derive,
    encode_secret,
    format_code,
    provisioning_uri,
    time_counter,
)
from knownids.errors import (
    EntropyUnavailable,
    InvalidEncoding,
    InvalidState,
    OTPError,
    UnknownIdentity,
)
from knownids.store import KeyStore, urandom_source

__version__ = "0.1.0"
