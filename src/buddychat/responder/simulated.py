"""Simulated assistant.

Replies after an artificial delay with a reply drawn from a fixed
combinatorial phrase space. No network access.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable, Sequence
from itertools import product

from ..config import RESPONSE_DELAY_MAX, RESPONSE_DELAY_MIN
from .base import ResponseGenerationError, ResponseGenerator
from .phrases import OPENINGS, TOPICS

SleepFunc = Callable[[float], Awaitable[None]]


class SimulatedResponseGenerator(ResponseGenerator):
    """Fixed-vocabulary response simulator.

    The random source and the sleep coroutine are injectable so that delay
    and reply selection are reproducible under test:

        gen = SimulatedResponseGenerator(rng=random.Random(7))
        reply = await gen.generate("hello")

    Failures can be forced with ``fail_next()`` (one-shot) or the
    ``always_fail`` switch.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        delay_min: float = RESPONSE_DELAY_MIN,
        delay_max: float = RESPONSE_DELAY_MAX,
        openings: Sequence[str] = OPENINGS,
        topics: Sequence[str] = TOPICS,
        sleep: SleepFunc | None = None,
    ) -> None:
        super().__init__()
        if delay_min < 0 or delay_max < delay_min:
            raise ValueError(
                f"Invalid delay range: [{delay_min}, {delay_max}]"
            )
        if not openings or not topics:
            raise ValueError("Openings and topics must both be non-empty")

        self._rng = rng or random.Random()
        self._delay_min = delay_min
        self._delay_max = delay_max
        self._openings = tuple(openings)
        self._topics = tuple(topics)
        self._sleep = sleep or asyncio.sleep
        self._failures_pending = 0
        self.always_fail = False

    def fail_next(self, count: int = 1) -> None:
        """Make the next ``count`` calls to ``generate`` fail."""
        self._failures_pending += count

    def next_delay(self) -> float:
        """Draw a simulated processing delay in seconds."""
        return self._rng.uniform(self._delay_min, self._delay_max)

    def compose_reply(self) -> str:
        """Draw one opening and one topic independently and join them."""
        opening = self._rng.choice(self._openings)
        topic = self._rng.choice(self._topics)
        return f"{opening} {topic}"

    async def generate(self, user_text: str) -> str:
        delay = self.next_delay()
        self._debug("debug", f"Simulating {delay:.2f}s of thinking")
        await self._sleep(delay)

        if self.always_fail or self._failures_pending > 0:
            if self._failures_pending > 0:
                self._failures_pending -= 1
            self._debug("warning", "Simulated backend failure")
            raise ResponseGenerationError("simulated backend failure")

        return self.compose_reply()

    @property
    def response_space(self) -> list[str]:
        """Every reply this generator can produce."""
        return [f"{opening} {topic}" for opening, topic in product(self._openings, self._topics)]

    @property
    def delay_range(self) -> tuple[float, float]:
        return self._delay_min, self._delay_max
