"""Export functionality for ttrk."""

from ttrk.export_import.base import Exporter
from ttrk.export_import.csv_format import CSVExporter

__all__ = ["Exporter", "CSVExporter"]
