"""Field validation for achievement writes.

Each predicate checks one field and raises that field's error kind.
``create`` runs them through :func:`validate_new_achievement` in a fixed
order; ``update`` calls :func:`validate_title` and
:func:`validate_description` directly, so both entry points accept
exactly the same titles and descriptions.

Lengths of text fields are counted in characters, of binary fields in
bytes.  Integer fields are Python ints and therefore signed, so every
range check enforces the lower bound of 0 as well.
"""

from __future__ import annotations

from achievements.core.errors import (
    InvalidAttachmentError,
    InvalidCategoryError,
    InvalidCommentError,
    InvalidDescriptionError,
    InvalidExpiryError,
    InvalidHashError,
    InvalidLevelError,
    InvalidMetadataError,
    InvalidRatingError,
    InvalidScoreError,
    InvalidTitleError,
)
from achievements.models.achievement import Category

HASH_LENGTH = 32
MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_METADATA_LENGTH = 200
MAX_COMMENT_LENGTH = 200
MAX_ATTACHMENT_LENGTH = 64
MAX_RATING = 5
MAX_SCORE = 100
MAX_LEVEL = 10


def _in_range(value: int, upper: int) -> bool:
    # bool is an int subclass; True is not a rating.
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= upper


def validate_content_hash(content_hash: bytes) -> None:
    if not isinstance(content_hash, bytes) or len(content_hash) != HASH_LENGTH:
        raise InvalidHashError(f"content hash must be exactly {HASH_LENGTH} bytes")


def validate_title(title: str) -> None:
    if not isinstance(title, str) or not title or len(title) > MAX_TITLE_LENGTH:
        raise InvalidTitleError(f"title must be 1-{MAX_TITLE_LENGTH} characters")


def validate_description(description: str) -> None:
    if not isinstance(description, str) or len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidDescriptionError(
            f"description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        )


def validate_category(category: str | Category) -> Category:
    try:
        return Category(category)
    except ValueError:
        allowed = "|".join(c.value for c in Category)
        raise InvalidCategoryError(f"category must be {allowed}") from None


def validate_metadata(metadata: str | None) -> None:
    if metadata is None:
        return
    if not isinstance(metadata, str) or len(metadata) > MAX_METADATA_LENGTH:
        raise InvalidMetadataError(
            f"metadata must be at most {MAX_METADATA_LENGTH} characters"
        )


def validate_expiry(expiry: int | None, current_height: int) -> None:
    if expiry is None:
        return
    if isinstance(expiry, bool) or not isinstance(expiry, int) or expiry <= current_height:
        raise InvalidExpiryError(
            f"expiry must be greater than the current height {current_height}"
        )


def validate_rating(rating: int) -> None:
    if not _in_range(rating, MAX_RATING):
        raise InvalidRatingError(f"rating must be 0-{MAX_RATING}")


def validate_comment(comment: str | None) -> None:
    if comment is None:
        return
    if not isinstance(comment, str) or len(comment) > MAX_COMMENT_LENGTH:
        raise InvalidCommentError(
            f"comment must be at most {MAX_COMMENT_LENGTH} characters"
        )


def validate_attachment(attachment: bytes | None) -> None:
    if attachment is None:
        return
    if not isinstance(attachment, bytes) or len(attachment) > MAX_ATTACHMENT_LENGTH:
        raise InvalidAttachmentError(
            f"attachment must be at most {MAX_ATTACHMENT_LENGTH} bytes"
        )


def validate_score(score: int) -> None:
    if not _in_range(score, MAX_SCORE):
        raise InvalidScoreError(f"score must be 0-{MAX_SCORE}")


def validate_level(level: int) -> None:
    if not _in_range(level, MAX_LEVEL):
        raise InvalidLevelError(f"level must be 0-{MAX_LEVEL}")


def validate_new_achievement(
    *,
    content_hash: bytes,
    title: str,
    description: str,
    category: str | Category,
    metadata: str | None,
    expiry: int | None,
    rating: int,
    comment: str | None,
    attachment: bytes | None,
    score: int,
    level: int,
    current_height: int,
) -> Category:
    """Run every field check in contract order; the first failure wins.

    Returns the parsed category so the caller stores the enum member.
    """
    validate_content_hash(content_hash)
    validate_title(title)
    validate_description(description)
    parsed_category = validate_category(category)
    validate_metadata(metadata)
    validate_expiry(expiry, current_height)
    validate_rating(rating)
    validate_comment(comment)
    validate_attachment(attachment)
    validate_score(score)
    validate_level(level)
    return parsed_category
