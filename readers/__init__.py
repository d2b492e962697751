"""Readers package: loads a WordPress export file into a nested mapping."""

from .export_reader import ExportReader, ExportReadError

__all__ = [
    'ExportReader',
    'ExportReadError'
]
