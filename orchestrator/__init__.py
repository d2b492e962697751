"""
Orchestration package for coordinating export pipeline phases.

This package sequences the export phases: Read → Extract → Convert → Link →
Write → Report.
"""

from .export_orchestrator import ExportOrchestrator
from .export_report import ExportReport

__all__ = [
    'ExportOrchestrator',
    'ExportReport'
]
