from __future__ import annotations


class RecordNotFound(ValueError):
    """Row does not exist or is owned by another user."""


class ConflictError(ValueError):
    pass


class AuthError(ValueError):
    pass


class UnconfirmedAccountError(AuthError):
    pass


class OAuthError(AuthError):
    pass
