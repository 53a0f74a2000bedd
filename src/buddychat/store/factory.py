"""Factory for creating key-value persistence backends."""

from typing import Any

from .base import KeyValueBackend


def create_backend(
    backend: str = "memory",
    **kwargs: Any
) -> KeyValueBackend:
    """Create a key-value persistence backend.

    Args:
        backend: Backend type ("memory" or "file")
        **kwargs: Backend-specific configuration

    Returns:
        KeyValueBackend instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryBackend
        return InMemoryBackend(**kwargs)

    elif backend == "file":
        from .file import FileBackend
        return FileBackend(**kwargs)

    raise ValueError(
        f"Unsupported storage backend: {backend}. "
        f"Supported backends: memory, file"
    )
