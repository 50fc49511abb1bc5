"""Exception hierarchy for dataknobs_forms.

Validation failures are never raised; they are reported as ``FieldError``
records inside a ``ValidationResult``. The exceptions here describe
programmer errors (bad form definitions, unknown field ids) and broken
bindings to external value sources.

Example:
    ```python
    from dataknobs_forms.exceptions import FormsError, NotFoundError

    try:
        form.validate_field("missing")
    except NotFoundError as e:
        logger.error(f"Error: {e}")
        logger.error(f"Context: {e.context}")
    ```
"""

from typing import Any, Dict


class FormsError(Exception):
    """Base exception for the forms package.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (field ids, etc.)
        details: Alternative to context (both are supported)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        # Details takes precedence if both are provided
        self.context = details or context or {}
        self.details = self.context


class ConfigurationError(FormsError):
    """Raised when a form, field or assertion is configured incorrectly.

    Common scenarios include:
    - Two mutually exclusive bounds set on one assertion
    - Duplicate field ids within a form
    - Registering fields or configuring assertions after the form is frozen
    - Invalid form configuration passed to the factory

    Example:
        ```python
        raise ConfigurationError(
            "Bound already set",
            context={"existing": "exactly", "requested": "at_least"}
        )
        ```
    """

    pass


class NotFoundError(FormsError):
    """Raised when a requested item is not found.

    Common scenarios include:
    - Validating or live-watching a field id that was never registered
    - A container that cannot locate the identifier of a new field
    - An assertion type missing from the assertion registry
    """

    pass


class UnavailableSourceError(FormsError):
    """Raised by a value source whose backing object no longer exists.

    This propagates out of ``Form.validate()``: a pass either completes or
    fails with this error, there is no partial result.
    """

    pass


__all__ = [
    "FormsError",
    "ConfigurationError",
    "NotFoundError",
    "UnavailableSourceError",
]
