import logging
from typing import List, Optional

from photojournal.core.errors import PhotoJournalError
from photojournal.schemas.photo import Photo
from photojournal.services.photos import PhotoRepository

logger = logging.getLogger(__name__)


class FeedPager:
    """Caller-side cursor over the public feed.

    Every request takes a generation number; a response that arrives after a
    newer request (or a reset) was issued is dropped instead of being applied
    out of order.
    """

    def __init__(self, repository: PhotoRepository, page_size: int = 9):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.repository = repository
        self.page_size = page_size
        self._generation = 0
        self.reset()

    def reset(self) -> None:
        self.photos: List[Photo] = []
        self.page = 0
        self.has_more = True
        self.error: Optional[str] = None
        self._generation += 1

    async def load_next(self) -> Optional[List[Photo]]:
        """Fetch the next page. Returns the batch, or None when exhausted or superseded."""
        if not self.has_more:
            return None

        self._generation += 1
        generation = self._generation
        page = self.page
        self.error = None

        try:
            batch = await self.repository.list_public(page * self.page_size, self.page_size)
        except PhotoJournalError as exc:
            if generation != self._generation:
                logger.debug("Dropping failure of superseded feed page %s: %s", page, exc.message)
                return None
            self.error = exc.message
            raise

        if generation != self._generation:
            logger.debug("Discarding stale feed page %s", page)
            return None

        self.photos.extend(batch)
        self.page = page + 1
        if len(batch) < self.page_size:
            self.has_more = False
        return batch
