"""Transcript output: export formats and optional per-session persistence."""
from .exporter import EXPORT_FORMATS, export, export_csv, export_markdown, export_text, format_time
from .writer import ResultWriterBase, create_result_writer

__all__ = [
    "EXPORT_FORMATS",
    "export",
    "export_csv",
    "export_markdown",
    "export_text",
    "format_time",
    "ResultWriterBase",
    "create_result_writer",
]
