"""Repository pattern implementation for data access."""

from .base_repository import (
    BaseRepository,
    RepositoryError,
    PersistenceWriteError
)
from .csv_repository import CSVRepository
from .memory_repository import InMemoryRepository
from .repository_factory import RepositoryFactory

__all__ = [
    # Base repository interface
    'BaseRepository',
    'RepositoryError',
    'PersistenceWriteError',

    # Concrete implementations
    'CSVRepository',
    'InMemoryRepository',

    # Factory
    'RepositoryFactory',
]
