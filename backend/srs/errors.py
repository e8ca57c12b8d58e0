"""Exceptions raised by the review transaction processor."""


class SchedulingError(Exception):
    """Base class for errors surfaced by the scheduling core."""


class ReviewValidationError(SchedulingError):
    """The review batch is missing, empty, or too large."""


class ReferentialIntegrityError(SchedulingError):
    """A card's deck, or that deck's course, no longer exists."""


class OwnershipError(SchedulingError):
    """A card in the batch belongs to a course owned by someone else."""


class ConcurrentReviewError(SchedulingError):
    """Another transaction updated a card in the batch first."""
