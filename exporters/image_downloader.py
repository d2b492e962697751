"""Staggered image downloads on a shared worker pool."""

import logging
import threading
import time
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import requests
from requests.utils import requote_uri

from models import WriteResult

DEFAULT_USER_AGENT = 'wp-export-to-markdown/1.0'
CHUNK_SIZE = 64 * 1024


class ImageDownloader:
    """
    Fetches images into post folders without blocking the caller.

    Each scheduled download gets a start time ``n * stagger_ms`` after the first
    one, where ``n`` counts every download scheduled so far. The delay is
    applied by the worker thread, so scheduling itself never sleeps.
    """

    def __init__(
        self,
        executor: Executor,
        config: Optional[Dict[str, Any]] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the downloader.

        Args:
            executor: pool the downloads run on
            config: configuration dictionary (``advanced`` section is read)
            session: HTTP session; a new one with our User-Agent by default
            logger: Logger instance
            sleep: delay function used by workers
            clock: monotonic clock used to compute start times
        """
        advanced = (config or {}).get('advanced', {})
        self.executor = executor
        self.timeout = advanced.get('request_timeout', 30)
        self.stagger = advanced.get('stagger_ms', 25) / 1000.0
        self.logger = logger or logging.getLogger('wp_export_to_markdown.exporters.image_downloader')
        self.sleep = sleep
        self.clock = clock

        if session is None:
            session = requests.Session()
            session.headers['User-Agent'] = advanced.get('user_agent') or DEFAULT_USER_AGENT
        self.session = session

        self._lock = threading.Lock()
        self._epoch: Optional[float] = None
        self.scheduled = 0

    def next_start_time(self) -> float:
        """Reserve the next stagger slot and return its start time."""
        with self._lock:
            if self._epoch is None:
                self._epoch = self.clock()
            start_at = self._epoch + self.scheduled * self.stagger
            self.scheduled += 1
        return start_at

    def schedule(self, url: str, target: Path) -> Future:
        """Queue a download of ``url`` into ``target``."""
        start_at = self.next_start_time()
        self.logger.debug(f"Scheduled download #{self.scheduled} of {url}")
        return self.executor.submit(self.download, url, Path(target), start_at)

    def download(self, url: str, target: Path, start_at: Optional[float] = None) -> WriteResult:
        """
        Download one image, waiting for its stagger slot first.

        Returns:
            WriteResult describing the outcome; failures are logged, not raised
        """
        if start_at is not None:
            delay = start_at - self.clock()
            if delay > 0:
                self.sleep(delay)

        try:
            with self.session.get(requote_uri(url), stream=True, timeout=self.timeout) as response:
                if response.status_code != 200:
                    self.logger.warning(
                        f"Response status code {response.status_code} received for {url}."
                    )
                    return WriteResult(
                        kind='image',
                        target=str(target),
                        source=url,
                        success=False,
                        error=f"HTTP {response.status_code}",
                        status_code=response.status_code
                    )

                target.parent.mkdir(parents=True, exist_ok=True)
                with open(target, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)

        except requests.exceptions.RequestException as e:
            self.logger.error(f"Unable to download image {url}: {e}")
            return WriteResult(kind='image', target=str(target), source=url, success=False, error=str(e))
        except OSError as e:
            self.logger.error(f"Unable to save image {url} to {target}: {e}")
            return WriteResult(kind='image', target=str(target), source=url, success=False, error=str(e))

        self.logger.info(f"Saved: {target}")
        return WriteResult(kind='image', target=str(target), source=url, status_code=200)

    def close(self) -> None:
        self.session.close()


__all__ = [
    'ImageDownloader'
]
