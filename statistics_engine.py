#!/usr/bin/env python3
"""
Descriptive statistics for survey dimensions.

Scores per dimension are summarised by mean, median, mode and population
standard deviation, and the spread is banded into a qualitative label for the
dashboard.
"""

from typing import Dict, Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict

CONSENSUS_LIMIT = 0.8
MODERATE_LIMIT = 1.3


class DescriptiveStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    mean: float = 0.0
    median: float = 0.0
    mode: float = 0.0
    std_dev: float = 0.0


def compute_mode(values: Sequence[float]) -> float:
    """
    Most frequent value, scanning in input order.

    The best value only changes on a strict improvement in frequency, so ties
    go to whichever value reached that frequency first.
    """
    frequency: Dict[float, int] = {}
    best_count = 0
    mode = values[0]

    for value in values:
        frequency[value] = frequency.get(value, 0) + 1
        if frequency[value] > best_count:
            best_count = frequency[value]
            mode = value

    return float(mode)


def describe(values: Sequence[float]) -> DescriptiveStats:
    """
    Summarise a numeric sample.

    Args:
        values (Sequence[float]): Sample values in their original order

    Returns:
        DescriptiveStats: All zeros for an empty sample
    """
    if len(values) == 0:
        return DescriptiveStats()

    sample = np.asarray(values, dtype=float)

    return DescriptiveStats(
        mean=float(np.mean(sample)),
        median=float(np.median(sample)),
        mode=compute_mode(values),
        std_dev=float(np.std(sample, ddof=0)),
    )


def interpret_dispersion(std_dev: float) -> str:
    """Band a standard deviation into Consensus / Moderate variation / Polarization."""
    if std_dev < CONSENSUS_LIMIT:
        return "Consensus"
    if std_dev < MODERATE_LIMIT:
        return "Moderate variation"
    return "Polarization"
