"""CSV export and import of transactions."""
import csv
import math
import uuid
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from models.transaction import Category, Transaction
from services.store import FinanceStore
from utils.formatting import format_amount

logger = logging.getLogger(__name__)

EXPORT_HEADERS = ['Date', 'Description', 'Category', 'Type', 'Amount']
AI_CATEGORIZED_ROWS = 5  # rows after this get Other to bound latency and cost


def export_filename(today: date) -> str:
    return f"finai_export_{today.isoformat()}.csv"


def export_csv(transactions: Sequence[Transaction]) -> str:
    """Renders transactions in their given order; descriptions are always quoted."""
    lines = [",".join(EXPORT_HEADERS)]
    for tx in transactions:
        quoted_description = '"' + tx.description.replace('"', '""') + '"'
        lines.append(",".join([
            tx.date.isoformat(),
            quoted_description,
            tx.category.value,
            tx.type,
            format_amount(tx.amount),
        ]))
    return "\n".join(lines)


REQUIRED_COLUMNS = ('date', 'description', 'amount')


def _split_line(line: str, strict: bool = True) -> List[str]:
    """Fields of one CSV line; raises csv.Error on bad quoting when strict."""
    return next(csv.reader([line], strict=strict), [])


def _column_layout(header: List[str]) -> Dict[str, Optional[int]]:
    """Named columns when the header has them, otherwise date, description, amount by position."""
    names = [name.strip().lower() for name in header]
    if set(REQUIRED_COLUMNS).issubset(names):
        return {
            'date': names.index('date'),
            'description': names.index('description'),
            'amount': names.index('amount'),
            'type': names.index('type') if 'type' in names else None,
        }
    return {'date': 0, 'description': 1, 'amount': 2, 'type': None}


async def import_csv(store: FinanceStore, classifier, text: str, today: date) -> Dict[str, Any]:
    """
    Parses CSV text one line at a time, categorizes the first few rows through
    `classifier` and prepends the resulting transactions to the store as one batch.
    A line with broken quoting is reported in `errors` and never affects its neighbours.
    """
    if not text.strip():
        return {"status": "no_data", "added_count": 0, "skipped_count": 0, "errors": [], "processed_transactions": []}

    lines = [line.rstrip('\r') for line in text.split('\n')]
    layout = _column_layout(_split_line(lines[0], strict=False))
    min_fields = max(layout[column] for column in REQUIRED_COLUMNS) + 1
    new_transactions: List[Transaction] = []
    errors: List[str] = []
    skipped_count = 0
    data_row = 0

    for line_number, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        data_row += 1
        try:
            row = _split_line(line)
        except csv.Error as e:
            logger.warning(f"Skipping line {line_number} due to malformed CSV: {e}")
            errors.append(f"Line {line_number}: Malformed CSV row ({e}).")
            continue
        if len(row) < min_fields:
            logger.debug(f"Skipping line {line_number}: only {len(row)} fields.")
            skipped_count += 1
            continue

        raw_date = row[layout['date']].strip()
        try:
            tx_date = datetime.strptime(raw_date, '%Y-%m-%d').date() if raw_date else today
        except ValueError:
            logger.warning(f"Skipping line {line_number} due to invalid date format: {raw_date}")
            errors.append(f"Line {line_number}: Invalid date format '{raw_date}'.")
            continue

        raw_amount = row[layout['amount']].strip()
        try:
            signed_amount = float(raw_amount) if raw_amount else 0.0
        except ValueError:
            signed_amount = math.nan
        if not math.isfinite(signed_amount):
            logger.warning(f"Skipping line {line_number} due to invalid value: {raw_amount}")
            errors.append(f"Line {line_number}: Invalid or missing value '{raw_amount}'.")
            continue

        description = row[layout['description']].strip() or "Unknown"

        tx_type = 'expense' if signed_amount < 0 else 'income'
        if layout['type'] is not None and layout['type'] < len(row):
            declared = row[layout['type']].strip().lower()
            if declared in ('income', 'expense'):
                tx_type = declared

        if data_row <= AI_CATEGORIZED_ROWS:
            category = await classifier.classify(description, signed_amount)
        else:
            category = Category.OTHER

        new_transactions.append(Transaction(
            id=str(uuid.uuid4()),
            date=tx_date,
            description=description,
            amount=abs(signed_amount),
            category=category,
            type=tx_type,
        ))

    if new_transactions:
        store.add_transactions(new_transactions)

    if new_transactions and not errors:
        status = "success"
    elif new_transactions and errors:
        status = "partial_success"
    elif not errors:
        status = "no_data"
    else:
        status = "error"

    logger.info(f"CSV import finished. Status: {status}, Added: {len(new_transactions)}, Skipped: {skipped_count}, Errors: {len(errors)}")
    return {
        "status": status,
        "added_count": len(new_transactions),
        "skipped_count": skipped_count,
        "errors": errors,
        "processed_transactions": [tx.model_dump(mode='json') for tx in new_transactions],
    }
