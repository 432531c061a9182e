from __future__ import annotations


class RankingError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    public_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class InvalidQueryError(RankingError):
    status_code = 400
    public_message = "Invalid query parameters"


class RestaurantNotFoundError(RankingError):
    status_code = 404
    public_message = "Restaurant not found"


class StoreUnavailableError(RankingError):
    """The document store is closed or failed to answer a query."""

    status_code = 500
    public_message = "Store unavailable"
