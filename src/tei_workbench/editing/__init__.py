"""Edit history for the TEI workbench."""

from .history import HistoryLog

__all__ = ["HistoryLog"]
