"""
Domain-specific errors for Patungan.

These represent validation failures of a bill. The allocation model and the
settlement engine hand them back inside an OperationResult instead of raising
them; callers decide whether to surface, ignore or raise them.
"""


class PatunganError(Exception):
    """Base error for all bill validation failures."""
    pass


class DuplicateNameError(PatunganError):
    """Raised when a participant name is already taken (case-insensitive)."""
    pass


class InvalidParticipantError(PatunganError):
    """Raised when a participant name is blank."""
    pass


class InvalidItemError(PatunganError):
    """Raised when an item has a negative price or a non-positive quantity."""
    pass


class OverAssignmentError(PatunganError):
    """Raised when assigned units would exceed the item quantity."""
    pass


class InvalidPolicyError(PatunganError):
    """Raised when tax, tip or split strategy values are unusable."""
    pass


class PayerRequiredError(PatunganError):
    """Raised when a settlement is requested without a present payer."""
    pass


class NothingToSummarizeError(PatunganError):
    """Raised when a bill has no items, no tax and no tip."""
    pass


class ParticipantNotFoundError(PatunganError):
    """Raised when a participant id is not part of the bill."""
    pass


class ItemNotFoundError(PatunganError):
    """Raised when an item id is not part of the bill."""
    pass


class InvalidSnapshotError(PatunganError):
    """Raised when a persisted bill record cannot be restored."""
    pass
