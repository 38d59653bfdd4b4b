#!/usr/bin/env python3
"""
School Climate Survey Analysis Pipeline (In-Memory Version)

This module runs the complete workflow for one uploaded survey export:
- Phase 0: Tokenize the raw CSV text
- Phase 1: Map rows onto survey records
- Phase 2: Aggregate dimension scores, role breakdowns and statistics
- Phase 3: Classify suggestion sentiment

The resulting AggregateView is what the dashboard, the CSV export and the AI
report consume. It is rebuilt from scratch for every upload.
"""

import math
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict

from csv_parser import load_raw_text, parse_csv
from data_cleaner import SurveyRecord, map_rows, records_to_dataframe
from sentiment import LABELS, NEGATIVE, NEUTRAL, POSITIVE, SentimentLabel, classify_sentiment
from statistics_engine import describe, interpret_dispersion

OTHER_ROLE = 'Other'
VIOLENCE_REPORTED = 'Sim'
MIN_SUGGESTION_LENGTH = 3

# Support is not asked directly; it is estimated from the mental health answers
SUPPORT_WEIGHT = 0.8

# Dashboard metric name -> score column in records_to_dataframe()
METRIC_COLUMNS = {
    'safety': 'safety_score',
    'facilities': 'facilities_score',
    'mental_health': 'mental_health_score',
    'respect': 'respect_students_score',
}


class EmptySurveyError(ValueError):
    """Raised when aggregation is requested for a survey with no valid records."""


class RoleSafety(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: str
    average_safety: float
    respondents: int


class SentimentDistribution(BaseModel):
    model_config = ConfigDict(frozen=True)

    positive: int = 0
    neutral: int = 0
    negative: int = 0
    counts: Dict[str, int] = {POSITIVE: 0, NEUTRAL: 0, NEGATIVE: 0}


class Suggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    role: str
    text: str
    sentiment: SentimentLabel
    timestamp: str


class MetricStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric: str
    mean: float
    median: float
    mode: float
    std_dev: float
    interpretation: str


class AggregateView(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    dimension_averages: Dict[str, float]
    violence_percentage: float
    safety_by_role: List[RoleSafety]
    sentiment: SentimentDistribution
    suggestions: List[Suggestion]
    advanced_stats: List[MetricStats]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def classify_suggestions(records: List[SurveyRecord]) -> List[Suggestion]:
    """
    Classify every suggestion with more than MIN_SUGGESTION_LENGTH characters.

    Args:
        records (List[SurveyRecord]): Survey records in input order

    Returns:
        List[Suggestion]: Numbered from 0 in the order they appear
    """
    suggestions = []
    for record in records:
        text = record.suggestion.strip()
        if len(text) <= MIN_SUGGESTION_LENGTH:
            continue
        suggestions.append(Suggestion(
            id=len(suggestions),
            role=record.role,
            text=text,
            sentiment=classify_sentiment(text),
            timestamp=record.timestamp,
        ))
    return suggestions


def sentiment_distribution(suggestions: List[Suggestion]) -> SentimentDistribution:
    """
    Percentage share of each sentiment label.

    Each share is rounded on its own, so the three do not always add up to
    exactly 100.
    """
    counts = {label: 0 for label in LABELS}
    for suggestion in suggestions:
        counts[suggestion.sentiment] += 1

    total = len(suggestions)
    if total == 0:
        return SentimentDistribution(counts=counts)

    return SentimentDistribution(
        positive=round_half_up(counts[POSITIVE] / total * 100),
        neutral=round_half_up(counts[NEUTRAL] / total * 100),
        negative=round_half_up(counts[NEGATIVE] / total * 100),
        counts=counts,
    )


def safety_by_role(df: pd.DataFrame) -> List[RoleSafety]:
    """
    Average safety score per respondent role, highest first.

    Blank roles are grouped under OTHER_ROLE. Roles with equal averages keep
    the order in which they first appear.
    """
    roles = df['role'].str.strip()
    grouped = (
        df.assign(role_group=roles.where(roles != '', OTHER_ROLE))
        .groupby('role_group', sort=False)['safety_score']
        .agg(score_sum='sum', respondents='count')
        .reset_index()
    )
    grouped['average'] = grouped['score_sum'] / grouped['respondents']
    grouped = grouped.sort_values('average', ascending=False, kind='stable')

    return [
        RoleSafety(role=row.role_group, average_safety=float(row.average), respondents=int(row.respondents))
        for row in grouped.itertuples(index=False)
    ]


def aggregate(records: List[SurveyRecord]) -> AggregateView:
    """
    Fold survey records into the dashboard's aggregate view.

    Args:
        records (List[SurveyRecord]): Output of map_rows()

    Returns:
        AggregateView: Dimension averages, role breakdown, statistics and
        classified suggestions

    Raises:
        EmptySurveyError: If records is empty
    """
    total = len(records)
    if total == 0:
        raise EmptySurveyError("Cannot aggregate a survey with no valid records")

    df = records_to_dataframe(records)

    dimension_averages = {
        'safety': float(df['safety_score'].sum()) / total,
        'facilities': float(df['facilities_score'].sum()) / total,
        'respect': float(df['respect_students_score'].sum()) / total,
        'mental_health': float(df['mental_health_score'].sum()) / total,
        'support': float((df['mental_health_score'] * SUPPORT_WEIGHT).sum()) / total,
    }

    violence_count = int((df['violence'] == VIOLENCE_REPORTED).sum())

    advanced_stats = []
    for metric, column in METRIC_COLUMNS.items():
        stats = describe(df[column].tolist())
        advanced_stats.append(MetricStats(
            metric=metric,
            mean=stats.mean,
            median=stats.median,
            mode=stats.mode,
            std_dev=stats.std_dev,
            interpretation=interpret_dispersion(stats.std_dev),
        ))

    suggestions = classify_suggestions(records)

    return AggregateView(
        total=total,
        dimension_averages=dimension_averages,
        violence_percentage=violence_count / total * 100,
        safety_by_role=safety_by_role(df),
        sentiment=sentiment_distribution(suggestions),
        suggestions=suggestions,
        advanced_stats=advanced_stats,
    )


def run_pipeline(text: str) -> AggregateView:
    """
    Runs the entire analysis pipeline in-memory for one CSV export.

    Args:
        text (str): Complete CSV document

    Returns:
        AggregateView: Aggregated results for the upload
    """
    print("🚀 Starting in-memory survey pipeline...")

    print("\n📋 PHASE 0: CSV TOKENIZING")
    print("-" * 50)
    rows = parse_csv(text)
    print(f"✅ Phase 0 Complete: {len(rows)} rows (including header).")

    print("\n🧹 PHASE 1: RECORD MAPPING")
    print("-" * 50)
    records = map_rows(rows)
    dropped = max(len(rows) - 1, 0) - len(records)
    print(f"✅ Phase 1 Complete: {len(records)} records mapped.")
    if dropped:
        print(f"   ⚠️  Skipped {dropped} rows with fewer cells than expected")

    print("\n📊 PHASE 2-3: AGGREGATION & SENTIMENT")
    print("-" * 50)
    view = aggregate(records)
    print(f"✅ Aggregated {view.total} responses, {len(view.suggestions)} suggestions classified.")
    print(f"   Sentiment: {view.sentiment.positive}% positive, "
          f"{view.sentiment.neutral}% neutral, {view.sentiment.negative}% negative")

    return view


def run_pipeline_from_file(file_path: str) -> AggregateView:
    return run_pipeline(load_raw_text(file_path))


def suggestions_to_dataframe(view: AggregateView, role: Optional[str] = None,
                             sentiment: Optional[str] = None) -> pd.DataFrame:
    """
    Tabulate classified suggestions for CSV export.

    Args:
        view (AggregateView): Aggregated results
        role (str, optional): Keep only suggestions from this role
        sentiment (str, optional): Keep only suggestions with this label

    Returns:
        pd.DataFrame: Columns ID, Role, Sentiment, Date, Feedback
    """
    rows = [
        {
            'ID': s.id,
            'Role': s.role,
            'Sentiment': s.sentiment,
            'Date': s.timestamp,
            'Feedback': s.text,
        }
        for s in view.suggestions
        if (role is None or s.role == role) and (sentiment is None or s.sentiment == sentiment)
    ]
    return pd.DataFrame(rows, columns=['ID', 'Role', 'Sentiment', 'Date', 'Feedback'])


def create_summary_json(view: AggregateView, sample_size: int = 15) -> Dict[str, Any]:
    """
    Compact payload describing the survey for the narrative report.

    Scores are rounded to one decimal place and only the first sample_size
    suggestions are included.
    """
    return {
        'total_respondents': view.total,
        'dimension_averages': {k: round(v, 1) for k, v in view.dimension_averages.items()},
        'violence_percentage': round(view.violence_percentage, 1),
        'safety_by_role': [
            {'role': r.role, 'average_safety': round(r.average_safety, 1)}
            for r in view.safety_by_role
        ],
        'dispersion': {s.metric: s.interpretation for s in view.advanced_stats},
        'sentiment': {
            'positive': view.sentiment.positive,
            'neutral': view.sentiment.neutral,
            'negative': view.sentiment.negative,
        },
        'total_comments': len(view.suggestions),
        'comment_sample': [s.text for s in view.suggestions[:sample_size]],
    }
