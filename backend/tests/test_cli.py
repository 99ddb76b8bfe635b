import csv

import pytest

from hrpayroll import cli
from hrpayroll.db import session as db_session
from hrpayroll.models import PayrollLine


@pytest.fixture(autouse=True)
def use_test_database(monkeypatch, session_factory):
    monkeypatch.setattr(db_session, "SessionLocal", session_factory)


def test_seed_generate_and_summary(capsys):
    cli.main(["seed", "--month", "3", "--year", "2024"])
    cli.main(["generate", "3", "2024"])
    cli.main(["summary", "3", "2024"])

    out = capsys.readouterr().out
    assert "Seeded company 1 with 3 employees" in out
    assert "Payroll 03/2024: 3 created, 0 regenerated, 0 skipped, 0 failed" in out
    assert "Employees: 3" in out
    assert "Engineering: 2 employees" in out


def test_generate_again_skips_and_force_regenerates(capsys):
    cli.main(["seed", "--month", "3", "--year", "2024"])
    cli.main(["generate", "3", "2024"])
    cli.main(["generate", "3", "2024"])
    cli.main(["generate", "3", "2024", "--force"])

    out = [line for line in capsys.readouterr().out.splitlines() if line.startswith("Payroll 03/2024")]
    assert out[-2] == "Payroll 03/2024: 0 created, 0 regenerated, 3 skipped, 0 failed"
    assert out[-1] == "Payroll 03/2024: 0 created, 3 regenerated, 0 skipped, 0 failed"


def test_company_option_scopes_commands(capsys, session_factory):
    cli.main(["--company", "7", "seed", "--month", "3", "--year", "2024"])
    cli.main(["generate", "3", "2024"])

    out = capsys.readouterr().out
    assert "Payroll 03/2024: 0 created" in out
    with session_factory() as session:
        assert session.query(PayrollLine).count() == 0


def test_export_writes_csv(tmp_path, capsys):
    cli.main(["seed", "--month", "3", "--year", "2024"])
    cli.main(["generate", "3", "2024"])
    target = tmp_path / "out" / "payroll.csv"

    cli.main(["export", "3", "2024", str(target)])

    assert "Exported 3 payroll lines" in capsys.readouterr().out
    with target.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert [row["employee_name"] for row in rows] == ["Ada Lovelace", "Grace Hopper", "Katherine Johnson"]
    assert all(row["status"] == "DRAFT" for row in rows)


def test_invalid_period_exits_with_message(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["summary", "13", "2024"])

    assert excinfo.value.code == 1
    assert "Month must be between 1 and 12" in capsys.readouterr().err
