"""Exception hierarchy for premisgen.

Only configuration and serialization problems are fatal. Everything that goes
wrong while assembling a record is recovered inside the assembler and surfaces
as warnings on the build report.
"""


class PremisgenError(Exception):
    """Base class for all premisgen errors."""


class ConfigurationError(PremisgenError):
    """Raised when the build cannot start (bad source root, bad profile)."""


class SerializationError(PremisgenError):
    """Raised when the finished record cannot be written."""


class BindingError(PremisgenError):
    """Raised when the binding module cannot produce the record root."""
