"""
Consultas reactivas sobre el almacén local.

ChangeNotifier es un registro de notificaciones por tabla: cada escritura
confirmada en una tabla despierta a todas las suscripciones abiertas que
leen de ella (y de las tablas hijas con ON DELETE CASCADE).

LiveQuery vuelve a ejecutar su consulta en cada notificación y re-emite
solo si el resultado cambió respecto al último valor emitido.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from typing import Generic, TypeVar

from sqlalchemy import MetaData

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class ChangeNotifier:
    def __init__(self, metadata: MetaData | None = None):
        self._listeners: dict[str, set[asyncio.Queue]] = defaultdict(set)
        self._cascades: dict[str, set[str]] = defaultdict(set)
        if metadata is not None:
            self.register_cascades(metadata)

    def register_cascades(self, metadata: MetaData) -> None:
        """Registra qué tablas se ven afectadas cuando se borra en su tabla padre."""
        for table in metadata.tables.values():
            for fk in table.foreign_keys:
                if (fk.ondelete or "").upper() == "CASCADE":
                    self._cascades[fk.column.table.name].add(table.name)

    def affected_tables(self, tables: Iterable[str]) -> set[str]:
        pending = list(tables)
        affected: set[str] = set()
        while pending:
            table = pending.pop()
            if table in affected:
                continue
            affected.add(table)
            pending.extend(self._cascades.get(table, ()))
        return affected

    def listen(self, tables: Iterable[str]) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        for table in tables:
            self._listeners[table].add(queue)
        return queue

    def unlisten(self, queue: asyncio.Queue) -> None:
        for listeners in self._listeners.values():
            listeners.discard(queue)

    def notify(self, *tables: str) -> None:
        """Se llama después del commit de una escritura."""
        for table in self.affected_tables(tables):
            for queue in self._listeners.get(table, ()):
                queue.put_nowait(table)

    def listener_count(self, table: str) -> int:
        return len(self._listeners.get(table, ()))


class LiveQuery(Generic[T]):
    """
    Suscripción que se actualiza sola.

    - `await query.get()` ejecuta la consulta una vez.
    - `async for value in query:` emite el valor actual y luego cada cambio.
    """

    def __init__(
        self,
        notifier: ChangeNotifier,
        tables: Iterable[str],
        fetch: Callable[[], Awaitable[T]],
    ):
        self._notifier = notifier
        self._tables = frozenset(tables)
        self._fetch = fetch

    @property
    def tables(self) -> frozenset[str]:
        return self._tables

    async def get(self) -> T:
        return await self._fetch()

    def map(self, fn: Callable[[T], U]) -> "LiveQuery[U]":
        async def _mapped() -> U:
            return fn(await self._fetch())

        return LiveQuery(self._notifier, self._tables, _mapped)

    def __aiter__(self) -> AsyncIterator[T]:
        return self._stream()

    async def _stream(self) -> AsyncIterator[T]:
        # Escuchar antes de la primera lectura para no perder escrituras
        queue = self._notifier.listen(self._tables)
        try:
            last = await self._fetch()
            yield last
            while True:
                await queue.get()
                while not queue.empty():
                    queue.get_nowait()
                current = await self._fetch()
                if current != last:
                    last = current
                    yield current
        finally:
            self._notifier.unlisten(queue)
