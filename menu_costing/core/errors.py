"""Errors raised by edit operations when the caller addresses something invalid.

Missing or inconsistent data never raises; it becomes a Diagnostic during
recompute. These exceptions only signal misuse of the edit API.
"""


class CostingError(ValueError):
    """Base class for edit-operation errors."""


class UnknownEntityError(CostingError):
    """The addressed inventory item, dish, mapping row or recipe line does not exist."""


class DuplicateEntityError(CostingError):
    """An entity with the same natural key already exists."""


class InvalidFieldError(CostingError):
    """The addressed field is not editable through this operation."""
