from typing import Dict, List


class PosAppError(Exception):
    """Base class for application errors."""


class ConfigurationError(PosAppError):
    pass


class SchemaProbeError(PosAppError):
    """A catalog query failed while probing an optional schema shape."""

    def __init__(self, table: str, original: Exception):
        super().__init__(f"Could not read columns of table '{table}': {original}")
        self.table = table
        self.original = original


class DuplicateValueError(PosAppError):
    """A uniqueness constraint rejected the value of a single form field."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class FormValidationError(PosAppError):
    def __init__(self, errors: Dict[str, List[str]], message: str = "Please correct the highlighted fields."):
        super().__init__(message)
        self.errors = errors
        self.message = message
