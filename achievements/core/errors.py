"""Error taxonomy for the achievement store.

One exception class per failure kind.  Every write operation raises at
most one of these, before it has mutated anything.  ``code`` is the
numeric error code of the on-ledger contract; ``http_status`` is what the
API layer answers with.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every rejection the store can produce."""

    kind: str = "StoreError"
    code: int = 0
    http_status: int = 400

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.kind
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"detail": self.message, "error": self.kind, "code": self.code}


class NotAuthorizedError(StoreError):
    kind = "NotAuthorized"
    code = 100
    http_status = 403


class InvalidHashError(StoreError):
    kind = "InvalidHash"
    code = 101
    http_status = 422


class InvalidTitleError(StoreError):
    kind = "InvalidTitle"
    code = 102
    http_status = 422


class InvalidDescriptionError(StoreError):
    kind = "InvalidDescription"
    code = 103
    http_status = 422


class InvalidCategoryError(StoreError):
    kind = "InvalidCategory"
    code = 104
    http_status = 422


class AlreadyExistsError(StoreError):
    kind = "AlreadyExists"
    code = 106
    http_status = 409


class NotFoundError(StoreError):
    kind = "NotFound"
    code = 107
    http_status = 404


class InvalidConfigError(StoreError):
    kind = "InvalidConfig"
    code = 109
    http_status = 422


class QuotaExceededError(StoreError):
    kind = "QuotaExceeded"
    code = 111
    http_status = 409


class InvalidMetadataError(StoreError):
    kind = "InvalidMetadata"
    code = 113
    http_status = 422


class InvalidExpiryError(StoreError):
    kind = "InvalidExpiry"
    code = 114
    http_status = 422


class InvalidRatingError(StoreError):
    kind = "InvalidRating"
    code = 116
    http_status = 422


class InvalidCommentError(StoreError):
    kind = "InvalidComment"
    code = 117
    http_status = 422


class InvalidAttachmentError(StoreError):
    kind = "InvalidAttachment"
    code = 118
    http_status = 422


class InvalidScoreError(StoreError):
    kind = "InvalidScore"
    code = 119
    http_status = 422


class InvalidLevelError(StoreError):
    kind = "InvalidLevel"
    code = 120
    http_status = 422
