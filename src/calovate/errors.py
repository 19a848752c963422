"""Exceptions raised by adapters and handled by services."""


class AuthenticationError(Exception):
    """Credential or session failure with a user-facing message."""


class BackingStoreError(RuntimeError):
    """A backing-store call did not succeed."""
