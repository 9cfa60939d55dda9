"""
Shared error types.

Kept in their own module so collaborators, detectors and tests import the
same exception classes.
"""


class LitigationIntelError(Exception):
    """Base class for engine errors."""


class RuleTableError(LitigationIntelError):
    """Raised when the rule-table YAML is missing or malformed."""


class CollaboratorError(LitigationIntelError):
    """Raised by collaborator implementations when a read fails."""
