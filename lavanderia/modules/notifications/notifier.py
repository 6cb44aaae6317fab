# lavanderia/modules/notifications/notifier.py

import asyncio
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Awaitable, Callable, Optional, Protocol, Sequence

from loguru import logger
from pydantic import BaseModel


class MessageSender(Protocol):
    async def send(self, to: str, body: str) -> bool: ...


@dataclass(frozen=True)
class OutboundMessage:
    to: str
    body: str


class BulkSendResult(BaseModel):
    total_eligible: int
    sent_count: int
    failed_count: int
    cancelled: bool = False


class PacingLimiter:
    """Espaça o início de cada envio em pelo menos `interval` segundos, entre todos os workers."""

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.interval = max(0.0, interval)
        self._clock = clock
        self._sleep = sleep
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None
        self._next_slot: Optional[float] = None

    def _get_lock(self) -> asyncio.Lock:
        # asyncio.Lock fica preso ao loop; o worker Celery abre um loop novo a cada execução
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def wait(self):
        async with self._get_lock():
            now = self._clock()
            if self._next_slot is not None and self._next_slot > now:
                await self._sleep(self._next_slot - now)
                now = self._clock()
            self._next_slot = now + self.interval


@lru_cache()
def get_shared_limiter(interval: float) -> PacingLimiter:
    """Um limitador por processo: envios em massa simultâneos dividem o mesmo ritmo."""
    return PacingLimiter(interval)


class BulkNotifier:
    """
    Envia uma lista de mensagens com concorrência limitada e ritmo fixo.

    Uma fila é drenada por no máximo `max_concurrency` workers; o limitador
    garante no máximo um envio iniciado a cada `pacing_seconds` (ou segue o
    `limiter` recebido, compartilhado com outros lotes). Uma falha
    (retorno False ou exceção do sender) conta como não enviada e nunca
    interrompe o lote. `cancel()` impede novos envios; envios em andamento
    terminam normalmente.
    """

    def __init__(
        self,
        sender: MessageSender,
        pacing_seconds: float = 0.1,
        max_concurrency: int = 1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        limiter: Optional[PacingLimiter] = None,
    ):
        self.sender = sender
        self.max_concurrency = max(1, max_concurrency)
        self.limiter = limiter or PacingLimiter(pacing_seconds, clock=clock, sleep=sleep)
        self._cancel_event = asyncio.Event()

    def cancel(self):
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    async def _dispatch(self, message: OutboundMessage) -> bool:
        try:
            return bool(await self.sender.send(message.to, message.body))
        except Exception as e:
            logger.bind(service="BulkNotifier", recipient=message.to).warning(f"Send failed: {e}")
            return False

    async def run(self, messages: Sequence[OutboundMessage]) -> BulkSendResult:
        log = logger.bind(service="BulkNotifier", total=len(messages))
        log.info("Starting bulk send...")

        queue: asyncio.Queue[OutboundMessage] = asyncio.Queue()
        for message in messages:
            queue.put_nowait(message)

        sent_count = 0
        failed_count = 0

        async def worker():
            nonlocal sent_count, failed_count
            while not self.cancelled:
                try:
                    message = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                await self.limiter.wait()
                if self.cancelled:
                    return
                if await self._dispatch(message):
                    sent_count += 1
                else:
                    failed_count += 1
                queue.task_done()

        worker_count = min(self.max_concurrency, len(messages))
        if worker_count:
            await asyncio.gather(*(worker() for _ in range(worker_count)))

        result = BulkSendResult(
            total_eligible=len(messages),
            sent_count=sent_count,
            failed_count=failed_count,
            cancelled=self.cancelled,
        )
        log.info(f"Bulk send finished: sent={sent_count} failed={failed_count} cancelled={result.cancelled}")
        return result
