import random
from typing import Any

from ..models import SessionSettings
from .base import ResponseGenerator
from .simulated import SimulatedResponseGenerator


def create_response_generator(
    generator: str = "simulated",
    settings: SessionSettings | None = None,
    **config: Any
) -> ResponseGenerator:
    """Create a response generator instance.

    This factory function hides the instantiation logic for different generators.

    Args:
        generator: Generator type (only 'simulated' is available)
        settings: Session settings supplying the delay range and seed
        **config: Generator-specific overrides (rng, sleep, openings, topics)

    Returns:
        Initialized response generator

    Raises:
        ValueError: If generator type is not supported

    Examples:
        >>> gen = create_response_generator(
        ...     "simulated",
        ...     settings=SessionSettings(seed=42, delay_min=0.1, delay_max=0.2)
        ... )
    """
    settings = settings or SessionSettings()

    if generator.lower() == "simulated":
        config.setdefault("rng", random.Random(settings.seed))
        config.setdefault("delay_min", settings.delay_min)
        config.setdefault("delay_max", settings.delay_max)
        return SimulatedResponseGenerator(**config)

    raise ValueError(
        f"Unsupported response generator: {generator}. "
        f"Supported generators: 'simulated'"
    )
