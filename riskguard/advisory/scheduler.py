import asyncio
from typing import Awaitable, Callable, Optional, Protocol

from riskguard.core.logging import get_logger
from riskguard.risk.risk_engine import TradeResults

logger = get_logger(__name__)

AdviceCallback = Callable[[str], Awaitable[None]]


class AdviceGenerator(Protocol):
    async def trade_advice(self, risk: float, rr: float, sl_percent: float) -> str:
        ...


class AdviceScheduler:
    """
    Debounced advice fetching for a stream of sizing results.

    Each ``submit`` supersedes the previous one: a pending delay is cancelled, and a
    response that arrives after a newer submit is dropped instead of delivered.
    Invalid results clear the current advice without calling the generator.
    """

    def __init__(
        self,
        generator: AdviceGenerator,
        delay: float = 1.5,
        on_advice: Optional[AdviceCallback] = None,
    ) -> None:
        self.generator = generator
        self.delay = max(delay, 0.0)
        self.on_advice = on_advice
        self.advice: str = ""
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._last_key: Optional[tuple] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, results: TradeResults) -> None:
        if not results.is_valid:
            self._last_key = None
            self.cancel()
            self.advice = ""
            return
        key = (results.actual_risk_amount, results.risk_reward_ratio, results.stop_loss_percentage)
        if key == self._last_key and (self.pending or self.advice):
            return
        self._last_key = key
        self.cancel()
        self._task = asyncio.create_task(self._run(self._generation, *key))

    def cancel(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the in-flight fetch, if any, to settle."""
        task = self._task
        if task is None:
            return
        await asyncio.wait({task})

    async def _run(self, generation: int, risk: float, rr: float, sl_percent: float) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        try:
            advice = await self.generator.trade_advice(risk, rr, sl_percent)
        except Exception as exc:
            logger.warning("advice_fetch_failed", extra={"event": "advice_fetch_failed", "error": str(exc)})
            return
        if generation != self._generation:
            logger.debug("advice_discarded", extra={"event": "advice_discarded", "generation": generation})
            return
        self.advice = advice
        if self.on_advice is not None:
            await self.on_advice(advice)
