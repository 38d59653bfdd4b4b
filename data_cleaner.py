#!/usr/bin/env python3
"""
Survey Record Mapping and Scale Conversion

Maps tokenized CSV rows from the school climate questionnaire onto typed
survey records, and converts the categorical answers into numbers:

- Rows are projected through a column schema (field -> candidate indices)
- The header row is always discarded
- Rows with fewer than MIN_CELLS cells are dropped
- Answer labels ("Sempre", "Nunca", "Sim", ...) map to a 0-5 scale

Usage:
    python data_cleaner.py --input survey_export.csv --output records.csv
"""

import argparse
from typing import Dict, List, Sequence, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict

from csv_parser import RawRow, load_raw_text, parse_csv

MIN_CELLS = 5

# Physical column positions in the questionnaire export. Fields with more than
# one candidate are tried in order; the two positions for mental_health cover
# the two known versions of the form.
ColumnSchema = Dict[str, Tuple[int, ...]]

DEFAULT_COLUMN_SCHEMA: ColumnSchema = {
    'timestamp': (0,),
    'role': (2,),
    'safety': (4,),
    'violence': (5,),
    'respect_students': (7,),
    'mental_health': (21, 18),
    'facilities': (13,),
    'suggestion': (15,),
}

SCALE_MAP: Dict[str, int] = {
    # Frequency scale
    'Sempre': 5,
    'Frequentemente': 4,
    'Às vezes': 3,
    'Raramente': 2,
    'Nunca': 1,

    # Yes/No questions
    'Sim': 1,
    'Não': 0,
    'Não Sei': 0,
    'Não sei!': 0,
}

SCORED_FIELDS = ['safety', 'respect_students', 'mental_health', 'facilities']


class SurveyRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str = ''
    role: str = ''
    safety: str = ''
    violence: str = ''
    respect_students: str = ''
    mental_health: str = ''
    facilities: str = ''
    suggestion: str = ''


def scale_value(label: str) -> int:
    """Numeric value of an answer label; anything unrecognised counts as 0."""
    return SCALE_MAP.get(label, 0)


def pick_cell(row: RawRow, candidates: Sequence[int]) -> str:
    """
    Return the first non-empty cell among the candidate indices.

    Args:
        row (RawRow): Tokenized row
        candidates (Sequence[int]): Column positions in order of preference

    Returns:
        str: Cell value, or an empty string if no candidate holds a value
    """
    for index in candidates:
        if index < len(row) and row[index]:
            return row[index]
    return ''


def map_rows(rows: List[RawRow], schema: ColumnSchema = DEFAULT_COLUMN_SCHEMA,
             min_cells: int = MIN_CELLS) -> List[SurveyRecord]:
    """
    Convert tokenized rows into survey records.

    The first row is treated as the header and skipped without inspection.
    Rows shorter than min_cells are dropped silently; every other row becomes
    a record, with missing columns left as empty strings.

    Args:
        rows (List[RawRow]): Output of parse_csv()
        schema (ColumnSchema): Field name -> candidate column indices
        min_cells (int): Minimum cell count for a row to be kept

    Returns:
        List[SurveyRecord]: Records in input order
    """
    records = []
    for row in rows[1:]:
        if len(row) < min_cells:
            continue
        values = {field: pick_cell(row, candidates) for field, candidates in schema.items()}
        records.append(SurveyRecord(**values))
    return records


def records_to_dataframe(records: List[SurveyRecord]) -> pd.DataFrame:
    """
    Build a DataFrame of records with numeric score columns.

    Each field in SCORED_FIELDS gets a companion '<field>_score' column holding
    its scale value.

    Args:
        records (List[SurveyRecord]): Mapped survey records

    Returns:
        pd.DataFrame: One row per record
    """
    columns = list(SurveyRecord.model_fields)
    df = pd.DataFrame([record.model_dump() for record in records], columns=columns)

    for field in SCORED_FIELDS:
        df[f'{field}_score'] = df[field].map(scale_value).astype(int)

    return df


def main():
    parser = argparse.ArgumentParser(description='Map a survey export to clean records')
    parser.add_argument('--input', required=True, help='Raw survey CSV export')
    parser.add_argument('--output', required=True, help='Path for the cleaned records CSV')
    args = parser.parse_args()

    print(f"📋 Cleaning survey export: {args.input}")

    rows = parse_csv(load_raw_text(args.input))
    records = map_rows(rows)
    dropped = max(len(rows) - 1, 0) - len(records)

    print(f"   Loaded {len(rows)} rows (including header)")
    print(f"   Mapped {len(records)} records, dropped {dropped} malformed rows")

    df = records_to_dataframe(records)
    df.to_csv(args.output, index=False)
    print(f"   ✅ Saved cleaned records: {args.output}")


if __name__ == "__main__":
    main()
