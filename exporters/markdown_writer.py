"""Writes converted posts and their images to the output tree."""

import logging
import sys
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from logger import ProgressTracker
from models import Post, WriteResult, filename_from_url
from .frontmatter import render_post
from .image_downloader import ImageDownloader
from .path_resolver import PathResolutionError, PathResolver


class ExportWriter:
    """
    Schedules Markdown writes and image downloads for a batch of posts.

    Writes run on a thread pool and report their own outcome. Nothing waits
    for them unless ``flush()`` is called; a failed task is logged and never
    stops the others.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        resolver: Optional[PathResolver] = None,
        downloader: Optional[ImageDownloader] = None,
        executor: Optional[Executor] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the writer.

        Args:
            config: Configuration dictionary
            resolver: path policy; built from ``config`` when omitted
            downloader: image downloader; built on the writer's pool when omitted
            executor: worker pool; a ThreadPoolExecutor sized by ``advanced.max_workers`` by default
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger('wp_export_to_markdown.exporters.markdown_writer')
        self.save_images = config.get('saveimages', True)
        self.show_progress = config.get('progress_bars', True)

        self.resolver = resolver or PathResolver(
            output=config.get('output', 'output'),
            folders=config.get('folders', 'path'),
            prefix_date=config.get('prefixdate', False),
            named_files=config.get('namedfiles', False)
        )

        max_workers = config.get('advanced', {}).get('max_workers', 8)
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix='wp2md'
        )
        self.downloader = downloader or ImageDownloader(self.executor, config=config)

        self.pending: List[Future] = []
        self.results: List[WriteResult] = []

        self.stats = {
            'posts_scheduled': 0,
            'images_scheduled': 0,
            'posts_written': 0,
            'posts_failed': 0,
            'images_saved': 0,
            'images_failed': 0,
        }

    def write_posts(self, posts: List[Post]) -> List[Future]:
        """
        Schedule every post (and its images) for writing.

        Returns:
            Futures of the tasks scheduled by this call
        """
        scheduled = []

        for post in posts:
            try:
                post_dir = self.resolver.get_post_dir(post)
                post_path = post_dir / self.resolver.get_post_filename(post)
                post_dir.mkdir(parents=True, exist_ok=True)
            except PathResolutionError as e:
                self.logger.error(f"Unable to resolve output path: {e}")
                self.results.append(WriteResult(kind='post', target=post.meta.slug, success=False, error=str(e)))
                continue
            except OSError as e:
                self.logger.error(f"Unable to create directory for post {post.meta.id}: {e}")
                self.results.append(WriteResult(kind='post', target=post.meta.slug, success=False, error=str(e)))
                continue

            scheduled.append(self.executor.submit(self._write_markdown, post, post_path))
            self.stats['posts_scheduled'] += 1

            if self.save_images and post.meta.image_urls:
                image_dir = post_dir / 'images'
                try:
                    image_dir.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    self.logger.error(f"Unable to create image directory {image_dir}: {e}")
                    for url in post.meta.image_urls:
                        self.results.append(WriteResult(
                            kind='image',
                            target=str(image_dir / filename_from_url(url)),
                            source=url,
                            success=False,
                            error=str(e)
                        ))
                    continue

                for url in post.meta.image_urls:
                    scheduled.append(self.downloader.schedule(url, image_dir / filename_from_url(url)))
                    self.stats['images_scheduled'] += 1

        self.pending.extend(scheduled)
        self.logger.info(
            f"Scheduled {self.stats['posts_scheduled']} post(s) and "
            f"{self.stats['images_scheduled']} image download(s)"
        )
        return scheduled

    def _write_markdown(self, post: Post, post_path: Path) -> WriteResult:
        try:
            post_path.write_text(render_post(post), encoding='utf-8')
        except OSError as e:
            self.logger.error(f"Unable to write file. {post_path}: {e}")
            return WriteResult(kind='post', target=str(post_path), success=False, error=str(e))
        except Exception as e:
            self.logger.error(f"Unable to write file. {post_path}: {e}", exc_info=True)
            return WriteResult(kind='post', target=str(post_path), success=False, error=str(e))

        self.logger.info(f"Wrote: {post_path}")
        return WriteResult(kind='post', target=str(post_path))

    def flush(self) -> List[WriteResult]:
        """Wait for every scheduled task and return all results in scheduling order."""
        pending, self.pending = self.pending, []

        futures = pending
        if self._should_show_progress() and pending:
            futures = tqdm(pending, desc="Writing", unit="task", leave=False)

        with ProgressTracker(len(pending), "write tasks") as tracker:
            for future in futures:
                result = future.result()
                self.results.append(result)
                tracker.increment(result.success)

        for result in self.results:
            self._count(result)

        results, self.results = self.results, []
        self._log_summary()
        return results

    def close(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
        self.downloader.close()

    def _count(self, result: WriteResult) -> None:
        if result.kind == 'post':
            key = 'posts_written' if result.success else 'posts_failed'
        else:
            key = 'images_saved' if result.success else 'images_failed'
        self.stats[key] += 1

    def _should_show_progress(self) -> bool:
        """Check if progress bars should be displayed."""
        if not self.show_progress:
            return False
        return sys.stdout.isatty()

    def _log_summary(self) -> None:
        """Log final write statistics."""
        self.logger.info("=" * 60)
        self.logger.info("MARKDOWN EXPORT SUMMARY")
        self.logger.info("=" * 60)
        self.logger.info(f"Posts written: {self.stats['posts_written']}")
        self.logger.info(f"Posts failed: {self.stats['posts_failed']}")
        self.logger.info(f"Images saved: {self.stats['images_saved']}")
        self.logger.info(f"Images failed: {self.stats['images_failed']}")
        self.logger.info(f"Output directory: {self.resolver.output}")
        self.logger.info("=" * 60)

    def get_stats(self) -> Dict[str, int]:
        """Get write statistics."""
        return self.stats.copy()


__all__ = [
    'ExportWriter'
]
