"""
Print a run of 16 consecutive one-time codes for a secret, to compare
against what an authenticator app showed at those times.

    knownids-codes --secret HEEKUKXMSYMV2B26 --then 2023-04-03T20:14:41-07:00
"""
import argparse
import logging
import sys
import time
from datetime import datetime
from typing import Iterator, Optional

from knownids import KeyStore, OTPError, TIME_STEP, time_counter

logger = logging.getLogger(__name__)

RUN_LENGTH = 16


def code_lines(secret: str, then: Optional[datetime] = None) -> Iterator[str]:
    keys = KeyStore("myOTP")
    keys.add_key("test", secret)
    now = time_counter(then)
    for i in range(RUN_LENGTH):
        t = (now + i) * TIME_STEP
        c = keys.code("test", now + i)
        stamp = time.strftime("%Y-%m-%d %H:%M:%S %z", time.localtime(t))
        yield f"{stamp} {t:12d} {t:34b} {c:06d}"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Print 16 consecutive TOTP codes for a secret.")
    parser.add_argument("--secret", required=True, help="secret in base32 encoding")
    parser.add_argument("--then", help="ISO 8601 timestamp to start from (default: now)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    then = None
    if args.then:
        try:
            then = datetime.fromisoformat(args.then)
        except ValueError as err:
            logger.error("failed to parse %r: %s", args.then, err)
            return 2
    try:
        for line in code_lines(args.secret, then):
            print(line)
    except OTPError as err:
        logger.error("cannot generate codes: %s", err)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
