from .amount_parser import AmountParser, from_minor_units, to_minor_units
from .classify import (
    calculate_income_and_expenses,
    categorize,
    perspective,
    to_entity_balance,
)
from .export import ExportFormat, ExportService

__all__ = [
    "AmountParser",
    "ExportFormat",
    "ExportService",
    "calculate_income_and_expenses",
    "categorize",
    "from_minor_units",
    "perspective",
    "to_entity_balance",
    "to_minor_units",
]
