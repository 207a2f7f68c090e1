class InvalidPeriod(ValueError):
    """Raised for a period identifier outside the supported set."""

    def __init__(self, period_id: object) -> None:
        super().__init__(f"invalid period: {period_id!r}")
        self.period_id = period_id


class MalformedTimestamp(ValueError):
    """Raised when a timestamp cannot be normalized to a calendar day."""

    def __init__(self, value: object) -> None:
        super().__init__(f"malformed timestamp: {value!r}")
        self.value = value


class UnresolvedExercise(LookupError):
    """Raised when an exercise id has no muscle-group definition."""

    def __init__(self, exercise_id: object) -> None:
        super().__init__(f"unresolved exercise: {exercise_id!r}")
        self.exercise_id = exercise_id
