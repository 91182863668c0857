import json

import cli
from test_argus import EXPECTED as EXPECTED_ARGUS


def test_sign_prints_headers(capsys):
    assert cli.main(["sign", "--query", "device_id=123456789", "--timestamp", "1700000000"]) == 0
    headers = json.loads(capsys.readouterr().out)
    assert headers["x-khronos"] == "1700000000"
    assert set(headers) >= {"x-gorgon", "x-ladon", "x-argus", "x-ss-stub", "x-ss-req-ticket", "content-length"}


def test_sign_without_device_id_fails(capsys):
    assert cli.main(["sign", "--query", "aid=1233"]) == 1


def test_decode_argus(capsys):
    assert cli.main(["decode-argus", EXPECTED_ARGUS]) == 0
    out = capsys.readouterr().out
    assert '5(STRING): "123456789"' in out
    assert "21(VARINT): 738" in out
