class SearchException(Exception):
    """Base class for everything that can stop a parameter search."""

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


class ExecutorFailure(SearchException):
    """A trial could not be completed (encoder, decoder or scorer failed)."""


class ConfigurationError(SearchException):
    """The run configuration is contradictory or out of range."""


class NonConvergence(SearchException):
    """A phase could not reach its stopping condition."""
