class MicroHabitError(Exception):
    """Base class for domain errors raised by the services."""


class ProfileNotFoundError(MicroHabitError):
    def __init__(self, message: str = "User profile not found"):
        super().__init__(message)


class HabitNotFoundError(MicroHabitError):
    def __init__(self, habit_id: str):
        self.habit_id = habit_id
        super().__init__(f"Habit {habit_id} not found")


class NoSuggestionError(MicroHabitError):
    def __init__(self, message: str = "No habit suggestion to accept"):
        super().__init__(message)


class LLMUnavailableError(MicroHabitError):
    """No API key configured, or the feature flag is off."""


class LLMRequestError(MicroHabitError):
    """The chat completion call failed or returned nothing usable."""
