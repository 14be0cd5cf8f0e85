"""Exceptions raised by the Bakeline core.

Absent data (no lot id, no upstream completion) is never an error; these
cover caller mistakes only.
"""


class InvalidArgumentError(ValueError):
    """A query or command argument failed validation at the boundary."""


class UnknownUnitError(KeyError):
    """No unit with the requested id is registered."""


class UnknownStageError(KeyError):
    """The unit has no stage with the requested id."""


class NothingToSubmitError(Exception):
    """The unit has not been started since its last submission."""
