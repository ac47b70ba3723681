import functools
import logging
import secrets
import threading
from typing import Callable, Dict, Optional, Union

from knownids import engine
from knownids.errors import (
    EntropyUnavailable,
    InvalidState,
    OTPError,
    UnknownIdentity,
)

logger = logging.getLogger(__name__)

EntropySource = Callable[[int], bytes]


def urandom_source(path: str = "/dev/urandom") -> EntropySource:
    """
    Entropy source reading directly from a random device file.
    The device is opened per call and always closed again.
    """
    def read(n: int) -> bytes:
        with open(path, 'rb') as device:
            return device.read(n)
    return read


def _initialized(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if getattr(self, '_secrets', None) is None:
            raise InvalidState(f"{type(self).__name__} used before initialization")
        return method(self, *args, **kwargs)
    return wrapper


class KeyStore:
    """
    Secret keys for a set of known identities, all issued by one
    issuer. Every access to the mapping holds a single lock, so
    concurrent callers observe one operation at a time.
    """

    def __init__(self, issuer: str, entropy: Optional[EntropySource] = None):
        self._issuer  = issuer
        self._entropy = entropy or secrets.token_bytes
        self._lock    = threading.Lock()
        self._secrets: Dict[str, str] = {}

    @property
    @_initialized
    def issuer(self) -> str:
        return self._issuer

    @_initialized
    def __contains__(self, identity: str) -> bool:
        with self._lock:
            return identity in self._secrets

    @_initialized
    def add_key(self, identity: str, key: str) -> None:
        """
        Add a (replacement) key for identity. The key material must be
        given in standard base32 encoding.
        """
        engine.decode_secret(key)
        with self._lock:
            replaced = identity in self._secrets
            self._secrets[identity] = key
        logger.info("%s key for %r (issuer %r)", "replaced" if replaced else "added",
                    identity, self._issuer)

    @_initialized
    def generate_key(self, identity: str) -> str:
        """
        Generate a random (replacement) 80 bit key for identity and
        return its base32 encoding.
        """
        try:
            raw = self._entropy(engine.SECRET_BYTES)
        except OSError as err:
            raise EntropyUnavailable(f"random source failed: {err}") from err
        if raw is None or len(raw) < engine.SECRET_BYTES:
            got = 0 if raw is None else len(raw)
            raise EntropyUnavailable(f"random source returned {got} of {engine.SECRET_BYTES} bytes")
        key = engine.encode_secret(bytes(raw[:engine.SECRET_BYTES]))
        self.add_key(identity, key)
        return key

    def _lookup(self, identity: str) -> str:
        with self._lock:
            key = self._secrets.get(identity)
        if key is None:
            raise UnknownIdentity(identity)
        return key

    @_initialized
    def enrollment_uri(self, identity: str) -> str:
        """
        URI for TOTP setup. Rendered as a QR code it lets Google
        Authenticator import the key.
        """
        return engine.provisioning_uri(self._issuer, identity, self._lookup(identity))

    @_initialized
    def code(self, identity: str, counter: int) -> int:
        """One time code for identity at the given time counter."""
        return engine.derive(engine.decode_secret(self._lookup(identity)), counter)

    @_initialized
    def validate_code_at(self, identity: str, code: Union[int, str], counter: int,
                         window_radius: int = 1) -> bool:
        """
        Check code against the counters within window_radius steps of
        counter, nearest first. Unknown identities and derivation
        failures count as a mismatch. Replays are not detected.
        """
        if window_radius < 0:
            raise ValueError("window_radius must not be negative")
        if isinstance(code, str):
            code = code.replace(" ", "")
            if len(code) != engine.DIGITS or not (code.isascii() and code.isdigit()):
                return False
            code = int(code)
        try:
            secret = engine.decode_secret(self._lookup(identity))
        except OTPError as err:
            logger.debug("cannot validate code for %r: %s", identity, err)
            return False
        for i in range(window_radius + 1):
            for step in ((i,) if i == 0 else (i, -i)):
                try:
                    if engine.derive(secret, counter + step) == code:
                        return True
                except ValueError as err:
                    logger.debug("skipping offset %+d for %r: %s", step, identity, err)
        logger.debug("code for %r did not match within %d steps", identity, window_radius)
        return False

    def validate_code(self, identity: str, code: Union[int, str], window_radius: int = 1) -> bool:
        """Validate code against the current time, see validate_code_at."""
        return self.validate_code_at(identity, code, engine.time_counter(), window_radius)
