from datetime import datetime

import codes

SECRET = "HEEKUKXMSYMV2B26"
THEN   = datetime.fromisoformat("2023-04-03T20:14:41-07:00")


def test_code_lines():
    lines = list(codes.code_lines(SECRET, THEN))
    assert len(lines) == 16
    first = lines[0].split()
    assert first[-1] == "133968"
    assert first[-2] == format(1680578070, "b")
    assert first[-3] == "1680578070"
    assert lines[1].split()[-3] == "1680578100"


def test_main_prints_codes(capsys):
    assert codes.main(["--secret", SECRET, "--then", "2023-04-03T20:14:41-07:00"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 16
    assert out[0].endswith(" 133968")


def test_main_rejects_bad_secret():
    assert codes.main(["--secret", "not-base32!!"]) == 1


def test_main_rejects_bad_timestamp():
    assert codes.main(["--secret", SECRET, "--then", "yesterday"]) == 2
