"""Repository factory for creating repository instances."""

from __future__ import annotations

from typing import Dict
import logging

from .base_repository import BaseRepository
from .csv_repository import CSVRepository
from .memory_repository import InMemoryRepository

logger = logging.getLogger(__name__)


class RepositoryFactory:
    """Factory for creating repository instances based on configuration.

    This factory allows the system to switch between repository
    implementations (CSV files, in-memory) based on configuration settings.
    """

    _repositories: Dict[str, type] = {
        'csv': CSVRepository,
        'memory': InMemoryRepository,
    }

    @classmethod
    def create_repository(cls, repository_type: str = 'csv', **kwargs) -> BaseRepository:
        """Create a repository instance based on type.

        Args:
            repository_type: Type of repository to create ('csv', 'memory')
            **kwargs: Additional arguments to pass to repository constructor

        Returns:
            Repository instance implementing BaseRepository interface

        Raises:
            ValueError: If repository type is not supported
        """
        if repository_type not in cls._repositories:
            raise ValueError(
                f"Unsupported repository type: {repository_type}. "
                f"Available types: {cls.get_available_types()}"
            )

        repository_class = cls._repositories[repository_type]

        # Remove 'type' from kwargs if present (it's already extracted as repository_type)
        clean_kwargs = {k: v for k, v in kwargs.items() if k != 'type'}

        # Filter kwargs based on repository type to avoid unsupported parameters
        if repository_type == 'csv':
            clean_kwargs = {k: v for k, v in clean_kwargs.items() if k in ['data_directory']}
        elif repository_type == 'memory':
            clean_kwargs = {}

        logger.info(f"Creating {repository_type} repository with args: {clean_kwargs}")
        return repository_class(**clean_kwargs)

    @classmethod
    def get_available_types(cls) -> list[str]:
        """Get list of available repository types.

        Returns:
            List of available repository type names
        """
        return list(cls._repositories.keys())
