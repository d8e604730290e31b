"""
Ejecutor generico de batches secuenciales con reintentos.

Desacoplado de la reconciliacion: recibe una funcion submit(batch) y una
RetryPolicy. Un batch que falla (tras agotar reintentos) se reporta en el
resultado y NO aborta los batches siguientes.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, Sequence, TypeVar

from loguru import logger

T = TypeVar("T")

DelayFn = Callable[[int], float]


def exponential_backoff(base_s: float = 0.5, cap_s: float = 8.0) -> DelayFn:
    """
    Delay exponencial simple + jitter proporcional fijo.
    attempt es 1 para el primer reintento.
    """

    def _delay(attempt: int) -> float:
        base = min(cap_s, base_s * (2 ** (attempt - 1)))
        return base + (0.15 * base)

    return _delay


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    delay: DelayFn = field(default_factory=exponential_backoff)

    @classmethod
    def no_retry(cls) -> "RetryPolicy":
        return cls(max_attempts=1, delay=lambda attempt: 0.0)


@dataclass
class BatchOutcome(Generic[T]):
    index: int
    items: list[T]
    ok: bool
    attempts: int
    error: Optional[str] = None
    # Valor retornado por submit (p.ej. filas realmente insertadas)
    result: object = None


class BatchExecutor:
    """
    Envia items en batches de tamaño fijo, uno tras otro, con una pausa
    corta entre batches (throttling para rate limits del destino).
    """

    def __init__(
        self,
        *,
        policy: Optional[RetryPolicy] = None,
        pause_s: float = 0.05,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._policy = policy or RetryPolicy()
        self._pause_s = pause_s
        self._sleep = sleep

    def run(
        self,
        items: Sequence[T],
        *,
        batch_size: int,
        submit: Callable[[list[T]], object],
    ) -> list[BatchOutcome[T]]:
        if batch_size < 1:
            raise ValueError("batch_size debe ser >= 1")

        outcomes: list[BatchOutcome[T]] = []
        batches = [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]

        for index, batch in enumerate(batches, start=1):
            outcome = self._run_one(index, batch, submit)
            outcomes.append(outcome)
            if outcome.ok:
                logger.info(f"Batch {index}/{len(batches)} insertado ({len(batch)} registros)")
            else:
                logger.error(
                    f"Batch {index}/{len(batches)} fallo tras {outcome.attempts} intento(s): {outcome.error}"
                )

            if index < len(batches) and self._pause_s > 0:
                self._sleep(self._pause_s)

        return outcomes

    def _run_one(
        self,
        index: int,
        batch: list[T],
        submit: Callable[[list[T]], object],
    ) -> BatchOutcome[T]:
        last_error: Optional[str] = None
        for attempt in range(1, self._policy.max_attempts + 1):
            try:
                result = submit(batch)
                return BatchOutcome(index=index, items=batch, ok=True, attempts=attempt, result=result)
            except Exception as e:
                last_error = str(e)
                if attempt >= self._policy.max_attempts:
                    break
                delay_s = self._policy.delay(attempt)
                logger.warning(
                    f"Batch {index} fallo (intento {attempt}/{self._policy.max_attempts}), "
                    f"reintentando en {delay_s:.2f}s: {last_error}"
                )
                self._sleep(delay_s)

        return BatchOutcome(
            index=index,
            items=batch,
            ok=False,
            attempts=self._policy.max_attempts,
            error=last_error,
        )
