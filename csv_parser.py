#!/usr/bin/env python3
"""
Phase 0: Raw CSV Tokenizer

Turns the text of a survey export into rows of string cells. Survey platforms
export free-text answers with embedded commas, line breaks and doubled quotes,
so the tokenizer walks the text character by character instead of splitting
on lines.

Usage:
    python csv_parser.py survey_export.csv
"""

import os
import sys
from typing import List

RawRow = List[str]

DELIMITER = ','
QUOTE = '"'

# Tried in order when decoding uploads; latin-1 never fails so it goes last
FALLBACK_ENCODINGS = ('utf-8-sig', 'cp1252', 'latin-1')


def parse_csv(text: str) -> List[RawRow]:
    """
    Parse CSV text into a list of rows.

    Quoted fields may contain commas, newlines and escaped quotes (""). Every
    cell is trimmed of surrounding whitespace. Blank lines outside quotes do
    not produce rows, and a final row without a trailing newline is kept.

    Args:
        text (str): Complete CSV document

    Returns:
        List[RawRow]: One list of cells per physical record
    """
    rows: List[RawRow] = []
    row: RawRow = []
    cell = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ''

        if char == QUOTE:
            if in_quotes and next_char == QUOTE:
                cell.append(QUOTE)
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            row.append(''.join(cell).strip())
            cell = []
        elif char in ('\r', '\n') and not in_quotes:
            if cell or row:
                row.append(''.join(cell).strip())
                rows.append(row)
                row = []
                cell = []
            if char == '\r' and next_char == '\n':
                i += 1
        else:
            cell.append(char)
        i += 1

    if cell or row:
        row.append(''.join(cell).strip())
        rows.append(row)

    return rows


def decode_csv_bytes(data: bytes) -> str:
    """
    Decode an uploaded CSV, trying each fallback encoding in turn.

    Args:
        data (bytes): Raw file contents

    Returns:
        str: Decoded text with any UTF-8 byte order mark removed
    """
    last_error = None
    for encoding in FALLBACK_ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as e:
            last_error = e
    raise ValueError(f"Could not decode CSV data: {last_error}")


def load_raw_text(file_path: str) -> str:
    """Read a CSV file from disk and return its decoded text."""
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Input file not found: {file_path}")

    with open(file_path, 'rb') as f:
        return decode_csv_bytes(f.read())


def main():
    """
    Command-line interface for the tokenizer: prints row and cell counts.
    """
    if len(sys.argv) < 2:
        print("Usage: python csv_parser.py <input_file>")
        sys.exit(1)

    try:
        rows = parse_csv(load_raw_text(sys.argv[1]))
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)

    print(f"✓ Parsed {len(rows)} rows")
    if rows:
        widths = sorted({len(r) for r in rows})
        print(f"  Cell counts seen: {widths}")
        print(f"  Header: {rows[0]}")


if __name__ == "__main__":
    main()
