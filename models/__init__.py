"""Data models exposed by the todo tracker."""
from .record import Origin, Record
from .local_record import CreationDateRow, LocalRecordRow

__all__ = ["CreationDateRow", "LocalRecordRow", "Origin", "Record"]
