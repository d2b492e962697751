"""
Export orchestrator for coordinating the conversion pipeline.

Sequences the export phases: Read → Extract → Convert → Link → Write → Report.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from converters import PostMarkdownConverter
from exporters import ExportWriter
from extractors import EntityExtractor, MetaFilter, link_images
from logger import ProgressTracker, log_section
from models import ExportContext, Post, WriteResult
from .export_report import ExportReport
from readers import ExportReader


class ExportOrchestrator:
    """Central coordinator sequencing all export phases."""

    def __init__(
        self,
        config: Dict[str, Any],
        logger: Optional[logging.Logger] = None,
        writer: Optional[ExportWriter] = None
    ):
        """
        Initialize export orchestrator.

        Args:
            config: Validated configuration dictionary
            logger: Optional logger instance
            writer: Optional pre-built writer (tests inject one with a fake session)
        """
        self.config = config
        self.logger = logger or logging.getLogger('wp_export_to_markdown.orchestrator')
        self.writer = writer
        self.context = ExportContext(config=config)
        self.report_generator = ExportReport(self.logger)

    def run(self, wait: bool = False) -> Dict[str, Any]:
        """
        Run the whole export.

        Args:
            wait: block until every write and download finished; otherwise the
                tasks keep running on the pool after this returns

        Returns:
            Report dictionary

        Raises:
            ExportReadError: if the export file cannot be read
            UnknownAuthorError: if a post names an author missing from the export
        """
        self.logger.info("Starting export orchestration")
        start_time = time.time()
        phase_stats: Dict[str, Any] = {}

        data = self._execute_read()
        phase_stats['extraction'] = self._execute_extraction(data)
        phase_stats['conversion'] = self._execute_conversion(self.context.posts)
        phase_stats['linking'] = self._execute_linking()
        phase_stats['writing'] = self._execute_writing(
            [post for post in self.context.posts if post.meta.id not in phase_stats['conversion']['failed_ids']],
            wait
        )

        duration = time.time() - start_time
        report = self.report_generator.generate_report(self.context, phase_stats, duration)
        self.logger.info(f"Export orchestration complete in {duration:.2f}s")
        return report

    def _execute_read(self) -> Dict[str, Any]:
        log_section("Phase 1: Read Export")
        data = ExportReader(self.config.get('input', 'export.xml'), logger=self.logger).read()
        channel = data['rss']['channel'][0]
        site_url = channel.get('base_site_url', [None])[0]
        self.context.site_url = site_url if isinstance(site_url, str) else None
        self.logger.info(f"Site: {self.context.site_url or 'unknown'}")
        return data

    def _execute_extraction(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Collect images, authors and posts into the run context."""
        log_section("Phase 2: Extract Entities")

        extractor = EntityExtractor(
            add_content_images=self.config.get('addcontentimages', True),
            post_filter=self.config.get('filter'),
            meta_filter=MetaFilter.from_config(self.config.get('meta_keys')),
        )

        self.context.images = extractor.collect_images(data)
        self.context.authors = extractor.collect_authors(data)
        self.context.posts = extractor.collect_posts(data, self.context.authors)

        stats = self.context.get_statistics()
        self.logger.info(
            f"Extracted {stats['posts']} posts, {stats['authors']} authors, "
            f"{stats['images']} images ({stats['images_scraped']} scraped)"
        )
        return stats

    def _execute_conversion(self, posts: List[Post]) -> Dict[str, Any]:
        """Convert every post body to Markdown."""
        log_section("Phase 3: Content Conversion")

        stats = {
            'posts_processed': 0,
            'posts_success': 0,
            'posts_failed': 0,
            'failed_ids': set(),
            'errors': []
        }

        if not posts:
            self.logger.warning("No posts to convert")
            return stats

        converter = PostMarkdownConverter(config=self.config)

        with ProgressTracker(total_items=len(posts), item_type='posts') as tracker:
            for post in posts:
                stats['posts_processed'] += 1
                try:
                    converter.convert_post(post)
                except Exception as e:
                    self.logger.error(
                        f"Failed to convert post '{post.title}' (ID: {post.meta.id}): {str(e)}",
                        exc_info=True
                    )
                    stats['posts_failed'] += 1
                    stats['failed_ids'].add(post.meta.id)
                    stats['errors'].append({
                        'phase': 'conversion',
                        'post_id': post.meta.id,
                        'post_title': post.title,
                        'error': str(e)
                    })
                    tracker.increment(success=False)
                    continue

                stats['posts_success'] += 1
                tracker.increment(success=True)

        self.logger.info(
            f"Phase 3 complete: {stats['posts_success']} success, "
            f"{stats['posts_failed']} failed"
        )
        return stats

    def _execute_linking(self) -> Dict[str, Any]:
        log_section("Phase 4: Link Images")
        linked = link_images(self.context.images, self.context.posts)
        return {
            'images': len(self.context.images),
            'linked': linked,
            'orphans': len(self.context.images) - linked
        }

    def _execute_writing(self, posts: List[Post], wait: bool) -> Dict[str, Any]:
        """Schedule writes; optionally wait and collect their results."""
        log_section("Phase 5: Write Files")

        if self.writer is None:
            self.writer = ExportWriter(self.config, logger=self.logger)

        self.writer.write_posts(posts)

        stats: Dict[str, Any] = {
            'posts_scheduled': self.writer.stats['posts_scheduled'],
            'images_scheduled': self.writer.stats['images_scheduled'],
            'completed': False,
            'errors': []
        }

        if not wait:
            self.logger.info("Writes continue in the background")
            return stats

        results: List[WriteResult] = self.writer.flush()
        stats.update(self.writer.get_stats())
        stats['completed'] = True
        stats['errors'] = [
            {
                'phase': 'writing',
                'kind': result.kind,
                'target': result.target,
                'source': result.source,
                'error': result.error
            }
            for result in results if not result.success
        ]
        return stats


__all__ = [
    'ExportOrchestrator'
]
