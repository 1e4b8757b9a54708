class DatabaseError(Exception):
    """Base for all database errors. Callers should surface these as 'try again'."""


class NotFoundError(DatabaseError):
    """Entity not found."""


class DuplicateError(DatabaseError):
    """Unique constraint violation."""


class IntegrityError(DatabaseError):
    """Foreign key or check constraint violation."""


class StaleWriteError(DatabaseError):
    """Row changed since it was read (optimistic concurrency conflict)."""
