"""Exception hierarchy for repokit.

Database and ORM failures (``IntegrityError``, ``OperationalError``,
``NoResultFound``) are never wrapped; they reach the caller as raised by
SQLAlchemy. The classes below cover what this package checks itself.
"""


class RepositoryError(Exception):
    """Base exception for repository errors."""


class ConversionError(RepositoryError, TypeError):
    """A model/entity conversion produced a value of the wrong type."""


class SpecificationError(RepositoryError, ValueError):
    """A specification cannot be turned into a query clause."""
