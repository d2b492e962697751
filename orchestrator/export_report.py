"""
Export report generator for aggregating statistics and formatting reports.

This module builds the report returned by the orchestrator and formats it for
console display.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from models import ExportContext


class ExportReport:
    """Generates export reports aggregating statistics from all phases."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('wp_export_to_markdown.orchestrator.export_report')

    def generate_report(
        self,
        context: ExportContext,
        phase_stats: Dict[str, Any],
        duration: float
    ) -> Dict[str, Any]:
        """
        Generate the export report.

        Args:
            context: run context holding the extracted entities
            phase_stats: Statistics from all phases
            duration: Total export duration in seconds

        Returns:
            Export report dictionary
        """
        errors = self._build_error_summary(phase_stats)
        writing = phase_stats.get('writing', {})

        report = {
            'summary': {
                **context.get_statistics(),
                'site_url': context.site_url,
                'output': context.config.get('output'),
                'duration': duration,
                'duration_formatted': self._format_duration(duration),
                'completed': writing.get('completed', False),
                'total_errors': len(errors),
            },
            'phases': {
                name: {key: value for key, value in stats.items() if key not in ('errors', 'failed_ids')}
                for name, stats in phase_stats.items()
            },
            'errors': errors,
            'timestamp': datetime.now().isoformat()
        }

        self.logger.info(
            f"Report generated: {report['summary']['posts']} posts, "
            f"{report['summary']['total_errors']} errors"
        )
        return report

    def _build_error_summary(self, phase_stats: Dict[str, Any]) -> List[Dict[str, Any]]:
        errors = []
        for stats in phase_stats.values():
            errors.extend(stats.get('errors', []))
        return errors

    def _format_duration(self, seconds: float) -> str:
        """Format duration in human-readable format."""
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            minutes = int(seconds // 60)
            secs = int(seconds % 60)
            return f"{minutes}m {secs}s"
        else:
            hours = int(seconds // 3600)
            minutes = int((seconds % 3600) // 60)
            secs = int(seconds % 60)
            return f"{hours}h {minutes}m {secs}s"

    def format_console_report(self, report: Dict[str, Any]) -> str:
        """
        Format report for console display.

        Args:
            report: Export report dictionary

        Returns:
            Formatted console string
        """
        sections = []

        sections.append("=" * 60)
        sections.append("EXPORT REPORT")
        sections.append("=" * 60)
        sections.append("")

        summary = report.get('summary', {})
        sections.append("Summary:")
        sections.append(f"  Site:     {summary.get('site_url') or 'unknown'}")
        sections.append(f"  Authors:  {summary.get('authors', 0)}")
        sections.append(f"  Posts:    {summary.get('posts', 0)}")
        sections.append(f"  Images:   {summary.get('images', 0)} ({summary.get('images_scraped', 0)} scraped)")
        sections.append(f"  Output:   {summary.get('output')}")
        sections.append(f"  Duration: {summary.get('duration_formatted', '0s')}")
        sections.append("")

        phases = report.get('phases', {})
        sections.append("Phase Breakdown:")
        sections.append("-" * 60)

        if 'conversion' in phases:
            conv = phases['conversion']
            sections.append(
                f"  Conversion: {conv.get('posts_success', 0)} success, "
                f"{conv.get('posts_failed', 0)} failed"
            )

        if 'linking' in phases:
            link = phases['linking']
            sections.append(
                f"  Linking:    {link.get('linked', 0)} linked, {link.get('orphans', 0)} orphaned"
            )

        if 'writing' in phases:
            write = phases['writing']
            if write.get('completed'):
                sections.append(
                    f"  Writing:    {write.get('posts_written', 0)} posts written, "
                    f"{write.get('posts_failed', 0)} failed"
                )
                sections.append(
                    f"  Images:     {write.get('images_saved', 0)} saved, "
                    f"{write.get('images_failed', 0)} failed"
                )
            else:
                sections.append(
                    f"  Writing:    {write.get('posts_scheduled', 0)} posts and "
                    f"{write.get('images_scheduled', 0)} images scheduled"
                )

        errors = report.get('errors', [])
        if errors:
            sections.append("")
            sections.append(f"Errors ({len(errors)}):")
            sections.append("-" * 60)
            for error in errors[:20]:
                target = error.get('target') or error.get('post_title') or error.get('post_id')
                sections.append(f"  [{error.get('phase')}] {target}: {error.get('error')}")
            if len(errors) > 20:
                sections.append(f"  ... and {len(errors) - 20} more")

        sections.append("=" * 60)
        return "\n".join(sections)


__all__ = [
    'ExportReport'
]
