"""Health engine exceptions."""


class HealthEngineError(Exception):
    """Base class for health engine errors."""


class PollCancelledError(HealthEngineError):
    """A poll cycle was superseded before it finished.

    Raised inside the engine only. Its results are discarded and never
    reach the cache.
    """


class InvalidComponentSetError(HealthEngineError):
    """The component list handed to a poll is malformed."""
