"""Command-line argument parsing driven by a usage message.

The entry points are in ``usagespec.parser``. Exceptions are in ``usagespec.errors``.
The result values are ``usagespec.value.Value`` objects.
"""

__version__ = "0.1.0"
__all__ = ["errors", "parser", "patterns", "textutil", "value"]