"""
Export service for ledger data.

Provides functionality to export transaction history to XLSX and CSV formats.
"""

import csv
import io
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional, cast

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from ledgerly.config import EXPORT_PAGE_SIZE
from ledgerly.models import Account, Transaction, TransactionCategory, TransactionFilter
from ledgerly.timeutil import to_datetime

from .amount_parser import from_minor_units
from .classify import calculate_income_and_expenses, categorize

if TYPE_CHECKING:
    from ledgerly.db import LedgerRepository

logger = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    XLSX = "xlsx"


HEADERS = [
    "ID",
    "Date",
    "From",
    "To",
    "Category",
    "Amount",
    "Amount (minor units)",
    "Tags",
    "Note",
    "Created At",
]


class ExportService:
    """Service for exporting transaction history to various formats."""

    page_size = EXPORT_PAGE_SIZE

    def __init__(self, ledger: "LedgerRepository"):
        """
        Initialize the export service.

        Args:
            ledger: Ledger facade to read transactions and accounts from
        """
        self.ledger = ledger

    def export(
        self,
        format: ExportFormat,
        start_date: Optional[int] = None,
        end_date: Optional[int] = None,
        account_id: Optional[str] = None,
    ) -> io.BytesIO:
        """Export in the given format. See ``export_to_csv`` for arguments."""
        if ExportFormat(format) == ExportFormat.XLSX:
            return self.export_to_xlsx(start_date, end_date, account_id)
        return self.export_to_csv(start_date, end_date, account_id)

    def export_to_csv(
        self,
        start_date: Optional[int] = None,
        end_date: Optional[int] = None,
        account_id: Optional[str] = None,
    ) -> io.BytesIO:
        """
        Export transactions to CSV format.

        Args:
            start_date: Optional inclusive lower bound on date (epoch ms)
            end_date: Optional inclusive upper bound on date (epoch ms)
            account_id: Optional account to restrict the history to

        Returns:
            BytesIO buffer containing the CSV data
        """
        transactions = self._get_transactions(start_date, end_date, account_id)
        accounts = self._get_accounts()

        text_buffer = io.StringIO()
        writer = csv.writer(text_buffer)
        writer.writerow(HEADERS)
        for txn in transactions:
            writer.writerow(
                [str(value) for value in self._row_values(txn, accounts)]
            )

        buffer = io.BytesIO()
        buffer.write(text_buffer.getvalue().encode("utf-8-sig"))  # BOM for Excel
        buffer.seek(0)
        return buffer

    def export_to_xlsx(
        self,
        start_date: Optional[int] = None,
        end_date: Optional[int] = None,
        account_id: Optional[str] = None,
    ) -> io.BytesIO:
        """
        Export transactions to XLSX format with formatting.

        Args:
            start_date: Optional inclusive lower bound on date (epoch ms)
            end_date: Optional inclusive upper bound on date (epoch ms)
            account_id: Optional account to restrict the history to

        Returns:
            BytesIO buffer containing the XLSX data
        """
        transactions = self._get_transactions(start_date, end_date, account_id)
        accounts = self._get_accounts()

        wb = Workbook()
        ws = cast(Worksheet, wb.active)
        ws.title = "Transactions"

        # Define styles
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(
            start_color="4472C4", end_color="4472C4", fill_type="solid"
        )
        category_fills = {
            TransactionCategory.INCOME.value: PatternFill(
                start_color="C6EFCE", end_color="C6EFCE", fill_type="solid"
            ),
            TransactionCategory.EXPENSE.value: PatternFill(
                start_color="FFC7CE", end_color="FFC7CE", fill_type="solid"
            ),
            TransactionCategory.TRANSFER.value: PatternFill(
                start_color="FFEB9C", end_color="FFEB9C", fill_type="solid"
            ),
        }

        for col, header in enumerate(HEADERS, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")

        for row_idx, txn in enumerate(transactions, 2):
            values = self._row_values(txn, accounts)
            for col, value in enumerate(values, 1):
                ws.cell(row=row_idx, column=col, value=value)

            fill = category_fills.get(values[4])
            if fill is not None:
                for col in range(1, len(HEADERS) + 1):
                    ws.cell(row=row_idx, column=col).fill = fill

            ws.cell(row=row_idx, column=6).number_format = "#,##0.00"

        column_widths = [38, 12, 20, 20, 10, 15, 20, 25, 40, 22]
        for col, width in enumerate(column_widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

        ws.freeze_panes = "A2"

        self._add_summary_sheet(wb, transactions, accounts)

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer

    def _add_summary_sheet(
        self,
        wb: Workbook,
        transactions: list[Transaction],
        accounts: dict[str, Account],
    ):
        """Add a summary sheet to the workbook."""
        ws = wb.create_sheet(title="Summary")

        header_font = Font(bold=True)
        title_font = Font(bold=True, size=14)

        ws.cell(row=1, column=1, value="Ledger Summary").font = title_font
        ws.cell(
            row=2,
            column=1,
            value=f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M')} UTC",
        )

        totals = calculate_income_and_expenses(transactions, accounts)
        transfer_count = sum(
            1
            for txn in transactions
            if self._category(txn, accounts) == TransactionCategory.TRANSFER.value
        )

        summary_start = 4
        ws.cell(row=summary_start, column=1, value="Category").font = header_font
        ws.cell(row=summary_start, column=2, value="Total").font = header_font

        rows = [
            ("Income", from_minor_units(totals["income"])),
            ("Expenses", from_minor_units(totals["expenses"])),
            ("Net", from_minor_units(totals["net"])),
        ]
        for offset, (label, value) in enumerate(rows, 1):
            ws.cell(row=summary_start + offset, column=1, value=label)
            cell = ws.cell(row=summary_start + offset, column=2, value=value)
            cell.number_format = "#,##0.00"

        ws.cell(row=summary_start + 5, column=1, value="Transactions").font = header_font
        ws.cell(row=summary_start + 5, column=2, value=len(transactions))
        ws.cell(row=summary_start + 6, column=1, value="Transfers")
        ws.cell(row=summary_start + 6, column=2, value=transfer_count)

        ws.column_dimensions["A"].width = 15
        ws.column_dimensions["B"].width = 18

    def _row_values(self, txn: Transaction, accounts: dict[str, Account]) -> list:
        from_account = accounts.get(txn.from_account_id)
        to_account = accounts.get(txn.to_account_id)
        return [
            txn.id,
            to_datetime(txn.date).strftime("%Y-%m-%d"),
            from_account.name if from_account else txn.from_account_id,
            to_account.name if to_account else txn.to_account_id,
            self._category(txn, accounts),
            from_minor_units(txn.amount),
            txn.amount,
            "; ".join(txn.tags),
            txn.note or "",
            to_datetime(txn.created_at).isoformat(),
        ]

    @staticmethod
    def _category(txn: Transaction, accounts: dict[str, Account]) -> str:
        from_account = accounts.get(txn.from_account_id)
        to_account = accounts.get(txn.to_account_id)
        if from_account is None or to_account is None:
            return ""
        return categorize(from_account.account_type, to_account.account_type).value

    def _get_transactions(
        self,
        start_date: Optional[int],
        end_date: Optional[int],
        account_id: Optional[str],
    ) -> list[Transaction]:
        """Read every matching transaction, one page at a time."""
        transactions: list[Transaction] = []
        while True:
            page = self.ledger.list_transactions(
                TransactionFilter(
                    account_id=account_id,
                    start_date=start_date,
                    end_date=end_date,
                    limit=self.page_size,
                    offset=len(transactions),
                )
            )
            transactions.extend(page)
            if len(page) < self.page_size:
                break

        logger.debug(f"Collected {len(transactions)} transactions for export")
        return transactions

    def _get_accounts(self) -> dict[str, Account]:
        return {
            account.id: account
            for account in self.ledger.list_accounts(include_archived=True)
        }

    def get_filename(
        self,
        format: ExportFormat,
        start_date: Optional[int] = None,
        end_date: Optional[int] = None,
    ) -> str:
        """
        Generate a filename for the export.

        Args:
            format: Export format
            start_date: Optional start date (epoch ms)
            end_date: Optional end date (epoch ms)

        Returns:
            Suggested filename
        """
        date_str = datetime.now(timezone.utc).strftime("%Y%m%d")

        if start_date is not None and end_date is not None:
            date_range = (
                f"_{to_datetime(start_date).strftime('%Y%m%d')}"
                f"-{to_datetime(end_date).strftime('%Y%m%d')}"
            )
        else:
            date_range = ""

        return f"ledgerly_{date_str}{date_range}.{ExportFormat(format).value}"
