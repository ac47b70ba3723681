class OTPError(Exception):
    """Base class for every error raised by knownids."""


class InvalidEncoding(OTPError, ValueError):
    """A supplied or stored key is not valid standard base32."""


class EntropyUnavailable(OTPError, OSError):
    """The random source could not supply enough bytes for a new key."""


class UnknownIdentity(OTPError, LookupError):
    """No key is stored for the requested identity."""

    def __init__(self, identity: str):
        super().__init__(f"no key stored for {identity!r}")
        self.identity = identity


class InvalidState(OTPError, RuntimeError):
    """The key store was used before it was initialized."""
