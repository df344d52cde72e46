"""
Cooldown Errors
Exceptions raised by the cooldown subsystem
"""


class CooldownError(Exception):
    """Base class for cooldown configuration and usage errors."""

    pass


class InvalidScopeError(CooldownError):
    """A guild-scoped cooldown was used outside of a guild."""

    def __init__(self, scope: str):
        self.scope = scope
        super().__init__(f'Invalid cooldown type "{scope}" used outside of a guild.')


class UnknownScopeError(CooldownError):
    """The cooldown scope is not one of the recognized scopes."""

    def __init__(self, scope: object, valid_scopes: list):
        self.scope = scope
        self.valid_scopes = valid_scopes
        super().__init__(
            f'Invalid cooldown type "{scope}". '
            f"Please use one of the following: {', '.join(valid_scopes)}"
        )


class MalformedDurationError(CooldownError):
    """A duration string does not match "<quantity> <unit>"."""

    def __init__(self, duration: object, message: str):
        self.duration = duration
        super().__init__(message)
