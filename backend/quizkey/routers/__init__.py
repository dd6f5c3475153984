from quizkey.routers import health, quizzes, share

__all__ = [
    "health",
    "quizzes",
    "share",
]
