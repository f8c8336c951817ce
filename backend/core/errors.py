"""
errors.py — Exceptions raised by the scoring engine.

Configuration gaps (no grading band, no assessment config) and missing
scores are not errors; they resolve to documented defaults. Only malformed
arguments and out-of-range score entry raise.
"""


class InvalidArgument(ValueError):
    """A collection argument was None/not iterable, or an option is unknown."""


class ScoreOutOfRange(ValueError):
    """A class or exam component falls outside its configured bounds."""

    def __init__(self, component: str, value, maximum):
        self.component = component
        self.value = value
        self.maximum = maximum
        super().__init__(f"{component} score {value} must be between 0 and {maximum}.")
