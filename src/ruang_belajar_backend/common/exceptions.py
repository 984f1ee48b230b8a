"""
This file contains custom, application-specific exceptions.
"""

class DatabaseNotInitializedError(RuntimeError):
    """Raised when a session is requested before the app lifespan created the database."""
    pass

class UnknownEntityKindError(ValueError):
    """Raised when a change notification names a collection that does not exist."""
    pass
