from fastapi import Query

from article_api.config import settings


class PaginationParams:
    """
    Reusable FastAPI dependency that parses the ``limit`` / ``offset``
    query parameters shared by the listing endpoints.

    Attributes
    ----------
    limit:
        Page size, between 1 and ``settings.MAX_PAGE_SIZE``.
    offset:
        Number of leading results to skip (>= 0).
    """

    def __init__(
        self,
        limit: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=settings.MAX_PAGE_SIZE,
            description="Number of articles to return (1-100).",
        ),
        offset: int = Query(
            0,
            ge=0,
            description="Number of articles to skip.",
        ),
    ) -> None:
        self.limit = limit
        self.offset = offset
