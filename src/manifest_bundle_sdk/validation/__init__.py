from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import BundleError
from ._bundle import validate_bundle
from ._result import ValidationIssue, ValidationResult

if TYPE_CHECKING:
    from ..models.bundle import Bundle


def require_complete(bundle: Bundle) -> ValidationResult:
    """Validate a bundle and raise if it cannot be installed.

    Checks for at least one script-or-key file, at least one manifest, and
    installable file names. Warnings are returned, never raised.

    Raises:
        BundleError: INCOMPLETE_BUNDLE if validation found any error.
    """
    result = validate_bundle(bundle)
    if not result.valid:
        raise BundleError(f"Incomplete bundle: {result.summary()}")
    return result


__all__ = [
    "ValidationIssue",
    "ValidationResult",
    "require_complete",
    "validate_bundle",
]
