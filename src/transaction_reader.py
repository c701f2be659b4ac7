import csv
import logging
import re
from typing import Callable, Dict, Iterator, Optional, TextIO

from errors import (
    InputFormatError,
    InputUnreadableError,
    MoneyError,
    RecordParseError,
    error_chain,
)
from models import Transaction, TransactionType
from money import Money

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TRANSACTION_ID = 2 ** 32 - 1

REQUIRED_COLUMNS = ("type", "client", "tx")

_ID_PATTERN = re.compile(r"^-?([0-9]+)$")

ErrorCallback = Callable[[RecordParseError], None]


def read_transactions(filepath: str, on_error: Optional[ErrorCallback] = None) -> Iterator[Transaction]:
    """
    Open a transactions CSV and return a lazy stream of parsed events in file order.

    Failing to open the file or read its header raises immediately. Malformed
    rows are logged, handed to `on_error` and skipped.
    """
    try:
        handle = open(filepath, "r", newline="", encoding="utf-8-sig")
    except OSError as e:
        raise InputUnreadableError(f"cannot open input file {filepath}") from e

    try:
        reader = csv.DictReader(handle)
        _check_header(filepath, reader)
    except BaseException:
        handle.close()
        raise

    return _iter_transactions(filepath, handle, reader, on_error)


def _check_header(filepath: str, reader: csv.DictReader) -> None:
    try:
        fieldnames = reader.fieldnames
    except (csv.Error, UnicodeDecodeError) as e:
        raise InputUnreadableError(f"cannot read header of input file {filepath}") from e

    if fieldnames is None:
        raise InputFormatError(f"input file {filepath} is empty")

    reader.fieldnames = [name.strip().lower() for name in fieldnames]
    missing = [column for column in REQUIRED_COLUMNS if column not in reader.fieldnames]
    if missing:
        raise InputFormatError(f"input file {filepath} is missing columns: {', '.join(missing)}")


def _iter_transactions(
    filepath: str,
    handle: TextIO,
    reader: csv.DictReader,
    on_error: Optional[ErrorCallback],
) -> Iterator[Transaction]:
    with handle:
        while True:
            try:
                row = next(reader)
            except StopIteration:
                return
            except (csv.Error, UnicodeDecodeError) as e:
                raise InputUnreadableError(f"cannot read record {reader.line_num} of input file {filepath}") from e

            try:
                yield parse_row(row, reader.line_num)
            except RecordParseError as e:
                logger.warning(f"Skipping malformed record: {'; caused by: '.join(error_chain(e))}")
                if on_error is not None:
                    on_error(e)


def parse_row(row: Dict[Optional[str], object], line_number: int) -> Transaction:
    """Parse CSV row into Transaction."""
    if None in row:
        raise RecordParseError(line_number, f"too many fields: {row[None]}")

    normalized = {key: value.strip() if isinstance(value, str) else value for key, value in row.items()}
    missing = [column for column in REQUIRED_COLUMNS if normalized.get(column) is None]
    if missing:
        raise RecordParseError(line_number, f"too few fields, missing {', '.join(missing)}")

    try:
        transaction_type = TransactionType(normalized["type"].lower())
    except ValueError as e:
        raise RecordParseError(line_number, f"unknown transaction type '{normalized['type']}'") from e

    client_id = _parse_id(line_number, "client", normalized["client"], MAX_CLIENT_ID)
    transaction_id = _parse_id(line_number, "tx", normalized["tx"], MAX_TRANSACTION_ID)

    amount = None
    if transaction_type.carries_amount:
        amount_str = normalized.get("amount") or ""
        if not amount_str:
            raise RecordParseError(line_number, f"{transaction_type.value} requires an amount")
        try:
            amount = Money.parse(amount_str)
        except MoneyError as e:
            raise RecordParseError(line_number, f"invalid amount '{amount_str[:32]}'") from e

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(line_number: int, column: str, value: str, maximum: int) -> int:
    match = _ID_PATTERN.match(value)
    if match is None:
        raise RecordParseError(line_number, f"{column} '{value[:32]}' is not an integer")
    if len(match.group(1).lstrip("0")) > len(str(maximum)):
        raise RecordParseError(line_number, f"{column} '{value[:32]}' is outside [0, {maximum}]")

    parsed = int(value)
    if not 0 <= parsed <= maximum:
        raise RecordParseError(line_number, f"{column} {parsed} is outside [0, {maximum}]")
    return parsed
