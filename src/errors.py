"""Domain exceptions shared by the search, store, and API layers."""


class ImmoError(Exception):
    """Base class for application errors."""


class InvalidSourceError(ImmoError, TypeError):
    """In-memory search source is not a sequence of listing records."""


class StoreUnavailableError(ImmoError):
    """Listing store could not be reached or the query failed."""


class PostNotFoundError(ImmoError):
    def __init__(self, post_id: int) -> None:
        super().__init__(f"Post {post_id} not found")
        self.post_id = post_id


class UserNotFoundError(ImmoError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class DuplicateLikeError(ImmoError):
    """A user tried to like the same post twice.

    Raised from the unique (user_id, post_id) constraint on ``post_likes``.
    Callers treat it as an expected outcome, not a system fault.
    """

    def __init__(self, user_id: int, post_id: int) -> None:
        super().__init__(f"User {user_id} already liked post {post_id}")
        self.user_id = user_id
        self.post_id = post_id
