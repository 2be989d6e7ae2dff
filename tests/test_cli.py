"""End-to-end tests for the command-line interface."""

import csv
import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from card_watch.cli import build_parser, customers_from_payload, main, parse_now, read_input_file
from card_watch.exceptions import ConfigurationError
from card_watch.models import MerchantCurrency
from card_watch.reports import EXPORT_COLUMNS

NOW = "2026-11-15"


@pytest.fixture(autouse=True)
def clean_env():
    """Run every CLI test against an empty environment."""
    with patch.dict(os.environ, {}, clear=True):
        yield


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.json"
    assert main(["sample", "--count", "20", "--seed", "7", "--now", NOW, "--output", str(path)]) == 0
    return path


class TestHelpers:
    """Tests for CLI helpers."""

    def test_parse_now_naive_is_utc(self) -> None:
        assert parse_now("2026-11-15T08:30").utcoffset().total_seconds() == 0

    def test_parse_now_invalid(self) -> None:
        with pytest.raises(ConfigurationError, match="--now"):
            parse_now("yesterday")

    def test_customers_from_payload_skips_invalid(self, raw_customer: dict) -> None:
        """Test both page shapes and invalid records."""
        customers = customers_from_payload(
            {"USD": {"elements": [raw_customer, {"firstName": "no id"}]}, "CAD": [dict(raw_customer, id="K1")]}
        )

        assert [c.key for c in customers] == [("USD", "AB12CD34EF56G"), ("CAD", "K1")]

    def test_customers_from_payload_unknown_currency(self, raw_customer: dict) -> None:
        with pytest.raises(ConfigurationError, match="EUR"):
            customers_from_payload({"EUR": [raw_customer]})

    @pytest.mark.parametrize("payload", [[{"id": "C1"}], "USD", {"USD": "not a page"}])
    def test_customers_from_payload_wrong_shape(self, payload: object) -> None:
        """Test documents that are not pages keyed by currency are rejected."""
        with pytest.raises(ConfigurationError):
            customers_from_payload(payload)

    def test_read_input_file_keeps_merchant_order(self, tmp_path: Path, raw_customer: dict) -> None:
        """Test the input store yields merchants in document order."""
        path = tmp_path / "input.json"
        path.write_text(
            json.dumps({"CAD": [dict(raw_customer, id="K1")], "USD": [raw_customer]}), encoding="utf-8"
        )

        store = read_input_file(str(path))

        assert [c.key for c in store.load_customers()] == [
            (MerchantCurrency.CAD, "K1"),
            (MerchantCurrency.USD, "AB12CD34EF56G"),
        ]

    def test_parser_requires_command(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCommands:
    """Tests for CLI commands against a generated sample file."""

    def test_sample_document(self, sample_file: Path) -> None:
        """Test the sample holds one page per merchant."""
        payload = json.loads(sample_file.read_text(encoding="utf-8"))

        assert set(payload) == {"USD", "CAD"}
        assert len(payload["USD"]["elements"]) == 20

    def test_sample_single_currency(self, tmp_path: Path) -> None:
        path = tmp_path / "cad.json"
        main(["sample", "--count", "3", "--currency", "CAD", "--now", NOW, "--output", str(path)])

        assert list(json.loads(path.read_text(encoding="utf-8"))) == ["CAD"]

    def test_report_csv(self, sample_file: Path, tmp_path: Path) -> None:
        """Test the CSV export."""
        out = tmp_path / "reports"
        code = main(
            ["report", "--input", str(sample_file), "--now", NOW, "--view", "all", "--format", "csv",
             "--output-dir", str(out)]
        )

        assert code == 0
        with open(out / "customers-2026-11-15.csv", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            rows = list(reader)
        assert reader.fieldnames == EXPORT_COLUMNS
        assert len(rows) == 40

    def test_report_json(self, sample_file: Path, tmp_path: Path) -> None:
        """Test the JSON export of the expired view."""
        out = tmp_path / "reports"
        code = main(
            ["report", "--input", str(sample_file), "--now", NOW, "--view", "expired", "--format", "json",
             "--output-dir", str(out)]
        )

        assert code == 0
        data = json.loads((out / "customers-expired-2026-11-15.json").read_text(encoding="utf-8"))
        assert all(item["has_expired"] for item in data)

    def test_report_console(self, sample_file: Path, capsys: pytest.CaptureFixture) -> None:
        """Test the console worklist table."""
        assert main(["report", "--input", str(sample_file), "--now", NOW, "--view", "all"]) == 0

        out = capsys.readouterr().out
        assert "all (40 records)" in out
        assert "card_status" in out

    def test_summary(self, sample_file: Path, capsys: pytest.CaptureFixture) -> None:
        """Test summary counts are printed."""
        assert main(["summary", "--input", str(sample_file), "--now", NOW]) == 0

        out = capsys.readouterr().out
        assert '"total_customers": 40' in out
        assert "Urgent customers:" in out

    def test_client_status(self, sample_file: Path, capsys: pytest.CaptureFixture) -> None:
        """Test the client status table and totals."""
        code = main(["client-status", "--input", str(sample_file), "--now", NOW, "--requiring-action"])

        assert code == 0
        assert "Total: 40" in capsys.readouterr().out

    def test_invalid_now(self, sample_file: Path) -> None:
        """Test a bad reference instant fails cleanly."""
        assert main(["summary", "--input", str(sample_file), "--now", "soon"]) == 1

    def test_missing_input(self, tmp_path: Path) -> None:
        """Test a missing input file fails cleanly."""
        assert main(["summary", "--input", str(tmp_path / "nope.json"), "--now", NOW]) == 1

    def test_sync_without_merchants(self, capsys: pytest.CaptureFixture) -> None:
        """Test sync refuses to run with no merchant configured and names the unset variables."""
        assert main(["sync"]) == 1

        out = capsys.readouterr().out
        assert "CLOVER_USD_MERCHANT_ID" in out
        assert "CLOVER_CAD_API_TOKEN" in out

    def test_unknown_currency_in_input(self, tmp_path: Path) -> None:
        """Test an unknown merchant key fails cleanly."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"EUR": []}), encoding="utf-8")

        assert main(["summary", "--input", str(path), "--now", NOW]) == 1
