"""Candidate-match filtering, ranking and skill-gap aggregation for the recruitment portal."""

__version__ = "0.1.0"
