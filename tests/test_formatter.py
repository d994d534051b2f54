from __future__ import annotations

import io

import pytest

from vtparse import Parser
from vtparse.formatter import VTParseHandler, main


def trace(data: bytes, codes_only: bool = False) -> str:
    out = io.StringIO()
    Parser(VTParseHandler(codes_only=codes_only, out=out)).feed(data)
    return out.getvalue()


def test_print():
    assert trace(b"A") == "Received action PRINT\nChar: 0x41 ('A')\n\n"


def test_csi_with_parameters():
    assert trace(b"\x1b[1;2m") == (
        "Received action CSI_DISPATCH\n"
        "Char: 0x6d ('m')\n"
        "2 Parameters:\n"
        "\t1\n"
        "\t2\n"
        "\n"
    )


def test_intermediate_chars():
    assert trace(b"\x1b[?1h") == (
        "Received action CSI_DISPATCH\n"
        "Char: 0x68 ('h')\n"
        "1 Intermediate chars:\n"
        "  0x3f ('?')\n"
        "1 Parameters:\n"
        "\t1\n"
        "\n"
    )


def test_codes_only():
    assert trace(b"\x1b[?1h", codes_only=True) == (
        "Received action CSI_DISPATCH\n"
        "Char: 0x68\n"
        "1 Intermediate chars:\n"
        "  0x3f\n"
        "1 Parameters:\n"
        "\t1\n"
        "\n"
    )


def test_state_triggered_action_has_no_char():
    assert trace(b"\x1b]") == "Received action OSC_START\n\n"


def test_unmapped_byte_traces_error():
    assert trace(b"\xe9") == "Received action ERROR\n\n"


def test_parameter_count_past_capacity():
    out = trace(b"\x1b[" + b";" * 20 + b"m")
    lines = out.splitlines()
    assert "20 Parameters:" in lines
    assert lines.count("\t0") == Parser.MAX_PARAMS


@pytest.fixture
def sample(tmp_path):
    path = tmp_path / "sample.bin"
    path.write_bytes(b"\x1bP0q\x1b\\")
    return path


def test_main(sample, capsys):
    main([str(sample)])
    assert capsys.readouterr().out == (
        "Received action HOOK\n"
        "1 Parameters:\n"
        "\t0\n"
        "\n"
        "Received action UNHOOK\n"
        "1 Parameters:\n"
        "\t0\n"
        "\n"
        "Received action ESC_DISPATCH\n"
        "Char: 0x5c ('\\')\n"
        "\n"
    )


def test_main_codes_only(sample, capsys):
    main(["--codes-only", str(sample)])
    assert "Char: 0x5c\n" in capsys.readouterr().out


def test_main_null(sample, capsys):
    main(["-n", str(sample)])
    assert capsys.readouterr().out == ""


def test_main_missing_file(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "missing")])
    assert exc.value.code != 0
