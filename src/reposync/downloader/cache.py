"""Once-per-run fetch of a downloader's origin remote."""
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class FetchCache:
    """Latch ensuring the remote is fetched at most once per run.

    The latch is only set after a successful fetch, so a failed fetch is
    retried on the next call. Not safe for concurrent use.
    """

    def __init__(self):
        self.fetched = False

    def cached_fetch(self, fn: Callable[[], object]) -> None:
        """Call fn unless a previous call already succeeded.

        Exceptions raised by fn propagate and leave the latch unset.
        """
        if self.fetched:
            logger.debug("Remote already fetched during this run")
            return

        fn()
        self.fetched = True

    def reset(self) -> None:
        """Start a new run: the next cached_fetch() fetches again."""
        self.fetched = False
