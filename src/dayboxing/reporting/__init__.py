"""Tabular exports and PDF reports for analyzed days."""

from .pdf import generate_day_report
from .tables import advice_frame, export_dataframe, segments_frame

__all__ = ["advice_frame", "export_dataframe", "generate_day_report", "segments_frame"]
