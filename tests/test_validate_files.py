from datetime import date
from pathlib import Path

import pytest

from xirr_solver import validate
from xirr_solver.finance.xirr import InvalidPayments, Payment

SAMPLES = Path(__file__).resolve().parent / "samples"


def _write(p: Path, name: str, text: str) -> Path:
    f = p / name
    f.write_text(text, encoding="utf-8")
    return f


def test_rows_map_one_to_one_to_payments():
    got = validate.load_payments_from_file(SAMPLES / "single_redemption.csv")
    assert len(got) == 7
    assert got[0] == Payment(date(2016, 1, 15), -1000.0)
    assert got[-1] == Payment(date(2019, 8, 23), 9259.2900308484)


def test_blank_lines_are_skipped(tmp_path):
    f = _write(tmp_path, "p.csv", "2016-06-11,-100\n\n2017-06-11,120\n")
    assert len(validate.load_payments_from_file(f)) == 2


@pytest.mark.parametrize(
    "text, where",
    [
        ("2016-06-11,-100\n2017-06-11\n", ":2:"),
        ("2016-06-11,-100,extra\n", ":1:"),
        ("11/06/2016,-100\n", ":1:"),
        ("2016-06-11,abc\n", ":1:"),
        ("2016-06-11garbage,1\n", ":1:"),
    ],
)
def test_malformed_rows_fail_fast(tmp_path, text, where):
    f = _write(tmp_path, "bad.csv", text)
    with pytest.raises(ValueError) as ei:
        validate.load_payments_from_file(f)
    assert f"{f}{where}" in str(ei.value)


def test_directory_is_not_a_payment_file(tmp_path):
    with pytest.raises(ValueError):
        validate.load_payments_from_file(tmp_path)


def test_strict_mode_requires_inflow_and_outflow(tmp_path):
    f = _write(tmp_path, "same.csv", "2016-06-11,-100\n2018-06-11,-200\n")
    assert len(validate.validate_payment_file(f, mode="relaxed")) == 2
    with pytest.raises(InvalidPayments):
        validate.validate_payment_file(f, mode="strict")


def test_main_reports_ok_for_samples(capsys):
    rc = validate._main([str(SAMPLES), "--mode", "strict"])
    out = capsys.readouterr().out
    assert rc == 0
    for name in ("single_redemption.csv", "random.csv", "non_converging.csv"):
        assert f"OK: {SAMPLES / name}" in out


def test_main_uses_env_mode(tmp_path, monkeypatch, capsys):
    _write(tmp_path, "same.csv", "2016-06-11,100\n2018-06-11,200\n")
    assert validate._main([str(tmp_path)]) == 0
    monkeypatch.setenv("VALIDATION_MODE", "strict")
    assert validate._main([str(tmp_path)]) == 1
    assert "negative and positive payments are required" in capsys.readouterr().err


def test_main_flags_empty_directory(tmp_path, capsys):
    assert validate._main([str(tmp_path)]) == 1
    assert "no payment files found" in capsys.readouterr().err


def test_strict_mode_honours_zero_as_inflow(tmp_path, capsys):
    f = _write(tmp_path, "zero.csv", "2016-06-11,-100\n2017-03-01,0\n")
    with pytest.raises(InvalidPayments):
        validate.validate_payment_file(f, mode="strict")
    assert len(validate.validate_payment_file(f, mode="strict", zero_is_inflow=True)) == 2
    assert validate._main([str(f), "--mode", "strict"]) == 1
    assert validate._main([str(f), "--mode", "strict", "--zero-as-inflow"]) == 0
    assert f"OK: {f}" in capsys.readouterr().out
