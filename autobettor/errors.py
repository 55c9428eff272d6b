"""Exceptions raised by AutoBettor and its collaborators."""


class AutobettorError(Exception):
    """Base class for everything the engine knows how to recover from."""


class ConfigError(AutobettorError):
    """Required configuration (e.g. login credentials) is missing."""


class StateReadError(AutobettorError):
    """The state file exists but could not be read or decoded."""


class ObserveError(AutobettorError):
    """The Observer could not reach the site or understand its answer."""


class LoginError(ObserveError):
    pass


class ExecError(AutobettorError):
    """Submitting a wager failed before the site confirmed it."""


class NotifyError(AutobettorError):
    pass
