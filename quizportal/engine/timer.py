"""Countdown Timer - Cronometro regressivo da tentativa."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class CountdownTimer:
    """Decrementa um segundo por tick e dispara on_expire ao chegar em zero.

    O loop automatico (start) chama tick() a cada tick_interval segundos.
    Testes podem chamar tick() diretamente sem iniciar o loop.

    Example:
        >>> timer = CountdownTimer(120, on_expire=session.submit)
        >>> timer.start()
        >>> ...
        >>> timer.stop()
        True
    """

    def __init__(
        self,
        seconds: int,
        on_expire: Callable[[], Awaitable[object]],
        tick_interval: float = 1.0,
        on_tick: Callable[[int], None] | None = None,
    ):
        self.remaining = max(0, seconds)
        self.tick_interval = tick_interval
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._task: asyncio.Task | None = None
        self._stopped = False
        self._expired = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._stopped

    def start(self) -> None:
        """Inicia o loop de ticks no event loop atual."""
        if self._task is not None or self._stopped:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while not self._stopped and self.remaining > 0:
            await asyncio.sleep(self.tick_interval)
            if self._stopped:
                break
            try:
                await self.tick()
            except Exception:
                logger.exception("Erro ao processar tick do cronometro")

    async def tick(self) -> None:
        """Consome um segundo; em zero, chama on_expire uma unica vez."""
        if self._stopped or self._expired or self.remaining <= 0:
            return

        self.remaining -= 1
        if self._on_tick is not None:
            self._on_tick(self.remaining)

        if self.remaining == 0:
            self._expired = True
            logger.info("Tempo esgotado")
            await self._on_expire()

    def stop(self) -> bool:
        """Para o cronometro.

        Returns:
            True na primeira chamada, False nas seguintes
        """
        if self._stopped:
            return False
        self._stopped = True

        task = self._task
        # Chamado de dentro do proprio loop (expiracao): o loop encerra sozinho
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()
        return True
