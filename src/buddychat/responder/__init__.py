from .base import ResponseGenerationError, ResponseGenerator
from .factory import create_response_generator
from .phrases import OPENINGS, TOPICS
from .simulated import SimulatedResponseGenerator

__all__ = [
    "OPENINGS",
    "TOPICS",
    "ResponseGenerationError",
    "ResponseGenerator",
    "SimulatedResponseGenerator",
    "create_response_generator",
]
