"""Quiz-related constants shared across the core and the API layer."""

PASSING_SCORE: int = 70
NOT_ATTEMPTED: str = "not attempted"
MAX_SCORE: int = 100
