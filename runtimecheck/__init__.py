"""
RuntimeCheck — Static runtime-compatibility checks for built-in API uses.

Classifies each resolved use of a runtime built-in API as deprecated,
removed, not yet supported, or not yet experimental for a configured target
version range, and formats a diagnostic with the relevant versions and any
replacement that is already usable.
"""

__version__ = "0.1.0"
