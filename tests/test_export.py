"""Tests for CSV and XLSX history exports."""

import csv
import io
import re

import pytest
from openpyxl import load_workbook

from ledgerly.services import ExportFormat, ExportService
from ledgerly.services.export import HEADERS

from .conftest import DAY, T0


@pytest.fixture
def exporter(ledger):
    return ExportService(ledger)


@pytest.fixture
def history(ledger, checking, savings, employer, landlord):
    ledger.create_transaction(T0, employer.id, checking.id, 500000, tags=["salary"])
    ledger.create_transaction(
        T0 + DAY, checking.id, landlord.id, 150000, tags=["rent", "home"], note="March"
    )
    ledger.create_transaction(T0 + 2 * DAY, checking.id, savings.id, 100000)


def _csv_rows(buffer):
    return list(csv.reader(io.StringIO(buffer.getvalue().decode("utf-8-sig"))))


class TestCsvExport:
    """Tests for CSV output."""

    def test_header_only_when_empty(self, exporter):
        assert _csv_rows(exporter.export_to_csv()) == [HEADERS]

    def test_rows(self, exporter, history):
        rows = _csv_rows(exporter.export_to_csv())
        assert rows[0] == HEADERS
        assert len(rows) == 4

        # Newest first
        transfer, rent, salary = rows[1:]
        assert transfer[2:5] == ["Checking", "Savings", "transfer"]
        assert rent[1] == "2023-11-15"
        assert rent[2:9] == [
            "Checking",
            "Landlord",
            "expense",
            "1500.00",
            "150000",
            "rent; home",
            "March",
        ]
        assert salary[4] == "income"

    def test_account_filter(self, exporter, history, savings):
        rows = _csv_rows(exporter.export_to_csv(account_id=savings.id))
        assert len(rows) == 2
        assert rows[1][3] == "Savings"

    def test_date_filter(self, exporter, history):
        rows = _csv_rows(exporter.export_to_csv(start_date=T0 + DAY, end_date=T0 + DAY))
        assert [row[4] for row in rows[1:]] == ["expense"]


class TestXlsxExport:
    """Tests for workbook output."""

    def test_sheets_and_rows(self, exporter, history):
        wb = load_workbook(exporter.export(ExportFormat.XLSX))
        assert wb.sheetnames == ["Transactions", "Summary"]

        ws = wb["Transactions"]
        assert [cell.value for cell in ws[1]] == HEADERS
        assert ws.max_row == 4
        assert ws.cell(row=3, column=5).value == "expense"
        assert ws.cell(row=3, column=7).value == 150000

    def test_summary_totals(self, exporter, history):
        ws = load_workbook(exporter.export_to_xlsx())["Summary"]
        totals = {
            ws.cell(row=row, column=1).value: ws.cell(row=row, column=2).value
            for row in range(5, 8)
        }
        assert totals == {"Income": 5000, "Expenses": 1500, "Net": 3500}
        assert ws.cell(row=9, column=2).value == 3
        assert ws.cell(row=10, column=2).value == 1


class TestFilename:
    def test_plain(self, exporter):
        assert re.fullmatch(
            r"ledgerly_\d{8}\.csv", exporter.get_filename(ExportFormat.CSV)
        )

    def test_with_range(self, exporter):
        name = exporter.get_filename(ExportFormat.XLSX, T0, T0 + DAY)
        assert name.endswith("_20231114-20231115.xlsx")


class TestLargeHistory:
    """Exports cover the whole log, however many pages it takes."""

    @pytest.fixture
    def small_pages(self, monkeypatch):
        monkeypatch.setattr(ExportService, "page_size", 2)

    @pytest.mark.parametrize("count", [5, 4])
    def test_csv_has_every_row(self, ledger, exporter, checking, landlord, small_pages, count):
        for i in range(count):
            ledger.transactions.create_transaction(T0 + i, checking.id, landlord.id, 100 + i)

        rows = _csv_rows(exporter.export_to_csv())
        assert len(rows) - 1 == count
        assert len({row[0] for row in rows[1:]}) == count

    def test_summary_counts_every_row(self, ledger, exporter, checking, employer, small_pages):
        for i in range(5):
            ledger.create_transaction(T0 + i, employer.id, checking.id, 100)

        ws = load_workbook(exporter.export_to_xlsx())["Summary"]
        assert ws.cell(row=5, column=2).value == 5
        assert ws.cell(row=9, column=2).value == 5
        assert load_workbook(exporter.export_to_xlsx())["Transactions"].max_row == 6
