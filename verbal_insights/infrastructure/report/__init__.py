"""PDF report rendering."""

from .pdf import ReportExporter

__all__ = ["ReportExporter"]
