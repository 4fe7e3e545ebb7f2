#!/usr/bin/env python3
"""
Exception classes for Dealsmith.
"""


class DealsmithError(Exception):
    """Base exception for Dealsmith errors"""
    pass


class FormatError(DealsmithError):
    """Raised when a document does not start with a delimited front matter block"""
    pass


class ContentError(DealsmithError):
    """Raised when the content directory or a sidecar file cannot be read"""
    pass


class BuildError(DealsmithError):
    """Raised when an output file cannot be written"""
    pass


class MissingFieldError(DealsmithError):
    """Raised when a deal omits a field a page template needs"""

    def __init__(self, source, field):
        self.source = source
        self.field = field
        super().__init__(f"{source}: missing required field '{field}'")


class CatalogValidationError(DealsmithError):
    """Raised once per load with every problem found across all deal files"""

    def __init__(self, errors):
        # errors: list of (source, field, message)
        self.errors = list(errors)
        lines = [f"  {source}: {field}: {message}" for source, field, message in self.errors]
        super().__init__(
            f"{len(self.errors)} problem(s) found in deal files:\n" + "\n".join(lines)
        )
