"""
CSV parsing utilities for billing API responses.

The billing API answers with semicolon-delimited text whose message column may
contain semicolons, quotes and line breaks. This module tokenizes that text,
maps header labels to column indices and builds SMS and access-list records.
"""

import logging
from typing import Dict, List, Optional

from sms_inspector.extractor import extract_info
from sms_inspector.models import AccessListRecord, SmsRecord

logger = logging.getLogger(__name__)

DELIMITER = ";"
QUOTE = '"'

# Logical field name -> header label, as sent by the billing API
SMS_COLUMNS = {
    "date_time": "datetime",
    "sender_id": "senderid",
    "phone": "b-number",
    "mcc_mnc": "mcc/mnc",
    "destination": "destination",
    "rate": "rate",
    "currency": "currency",
    "message": "message",
}

ACCESS_LIST_COLUMNS = {
    "price": "price",
    "access_origin": "access origin",
    "access_destination": "access destination",
    "test_number": "test number",
    "rate": "rate",
    "currency": "currency",
    "comment": "comment",
    "message": "message",
    "limit_hour": "limit hour",
    "limit_day": "limit day",
    "datetime": "datetime",
}


class MissingColumnsError(ValueError):
    """Raised when the header row lacks a column a record type cannot do without."""


def parse_csv_with_quotes(text: str) -> List[List[str]]:
    """
    Split delimited text into rows of fields.

    Quoted fields may contain delimiters, line breaks and doubled quotes.
    An unterminated quote is closed by the end of input. Rows consisting of a
    single empty field (blank lines) are dropped.

    Args:
        text: Raw response body

    Returns:
        List of rows, each a list of field strings
    """
    rows: List[List[str]] = []
    row: List[str] = []
    field: List[str] = []
    in_quotes = False
    # str.strip() keeps a leading byte order mark
    text = text.strip().lstrip("\ufeff").strip()
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if in_quotes:
            if ch == QUOTE:
                if i + 1 < n and text[i + 1] == QUOTE:
                    field.append(QUOTE)
                    i += 2
                    continue
                in_quotes = False
            else:
                field.append(ch)
        elif ch == QUOTE:
            in_quotes = True
        elif ch == DELIMITER:
            row.append("".join(field))
            field = []
        elif ch == "\n" or ch == "\r":
            row.append("".join(field))
            rows.append(row)
            row = []
            field = []
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
        else:
            field.append(ch)
        i += 1

    # Flush the last row when the input has no trailing line break
    if field or row:
        row.append("".join(field))
        rows.append(row)

    return [r for r in rows if len(r) > 1 or (len(r) == 1 and r[0])]


class CSVColumnMapper:
    """
    Resolves logical field names to column indices from a header row.

    Headers are compared after trimming and lower-casing. When two headers
    normalize to the same label the first one wins.
    """

    def __init__(self, headers: List[str]):
        self.headers = headers
        self.normalized_headers = [h.strip().lower() if h else "" for h in headers]

    def index_of(self, label: str) -> int:
        """Column index of a header label, or -1 when absent."""
        try:
            return self.normalized_headers.index(label.strip().lower())
        except ValueError:
            return -1

    def build_column_map(self, columns: Dict[str, str]) -> Dict[str, int]:
        return {name: self.index_of(label) for name, label in columns.items()}


def _field_at(row: List[str], index: int) -> Optional[str]:
    if index < 0 or index >= len(row):
        return None
    return row[index]


def parse_sms_records(text: str) -> List[SmsRecord]:
    """
    Build SMS records from a billing API CSV body.

    Rows too short to hold the message column are skipped.

    Raises:
        MissingColumnsError: if the datetime or message column is absent
    """
    all_rows = parse_csv_with_quotes(text)
    if len(all_rows) < 2:
        return []

    mapper = CSVColumnMapper(all_rows[0])
    column_map = mapper.build_column_map(SMS_COLUMNS)
    if column_map["date_time"] == -1 or column_map["message"] == -1:
        raise MissingColumnsError(
            "CSV response is missing required columns ('datetime', 'message')."
        )

    message_idx = column_map["message"]
    records = []
    skipped = 0
    for parts in all_rows[1:]:
        if len(parts) <= message_idx:
            skipped += 1
            continue

        message = parts[message_idx]
        records.append(
            SmsRecord(
                date_time=_field_at(parts, column_map["date_time"]) or "",
                sender_id=_field_at(parts, column_map["sender_id"]),
                phone=_field_at(parts, column_map["phone"]),
                mcc_mnc=_field_at(parts, column_map["mcc_mnc"]),
                destination=_field_at(parts, column_map["destination"]),
                rate=_field_at(parts, column_map["rate"]),
                currency=_field_at(parts, column_map["currency"]),
                message=message,
                extracted_info=extract_info(message),
            )
        )

    if skipped:
        logger.debug("Skipped %d malformed SMS rows", skipped)
    return records


def parse_access_list_records(text: str) -> List[AccessListRecord]:
    """
    Build access-list records from a billing API CSV body.

    Rows are not length-checked: a column past the end of a short row
    comes back as None.

    Raises:
        MissingColumnsError: if the access origin column is absent
    """
    all_rows = parse_csv_with_quotes(text)
    if len(all_rows) < 2:
        return []

    mapper = CSVColumnMapper(all_rows[0])
    column_map = mapper.build_column_map(ACCESS_LIST_COLUMNS)
    if column_map["access_origin"] == -1:
        raise MissingColumnsError(
            "CSV response is missing required column ('access origin')."
        )

    return [
        AccessListRecord(
            **{name: _field_at(parts, idx) for name, idx in column_map.items()}
        )
        for parts in all_rows[1:]
    ]
