# pocketpet/engine/context.py
import asyncio
import random
from typing import Callable, Coroutine, Optional, Set

import structlog

from pocketpet.core.clock import Clock
from pocketpet.engine.resolver import ConditionResolver
from pocketpet.models.pet import PetRecord

log = structlog.get_logger(__name__)

CommitHook = Callable[[PetRecord], None]


class SimulationContext:
    """
    The one owner of the live pet record.

    Scheduler loops and action handlers receive this object instead of
    reaching for a module-level store; every mutation ends in commit(),
    which runs the resolve pass and hands the record to the commit hook
    (persistence).
    """

    def __init__(self, record: PetRecord, clock: Clock, resolver: Optional[ConditionResolver] = None,
                 rng: Optional[random.Random] = None, on_commit: Optional[CommitHook] = None):
        self.record = record
        self.clock = clock
        self.rng = rng or random.Random()
        self.resolver = resolver or ConditionResolver(self.rng)
        self.on_commit = on_commit
        self._tasks: Set[asyncio.Task] = set()

    def now(self):
        return self.clock.now()

    def commit(self) -> PetRecord:
        self.resolver.resolve(self.record, self.clock.now())
        if self.on_commit is not None:
            self.on_commit(self.record)
        return self.record

    def replace_record(self, record: PetRecord):
        self.record = record

    def spawn(self, coro: Coroutine, name: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            log.error("Background task failed", task=task.get_name(), error=str(error), exc_info=error)

    async def cancel_all(self):
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
