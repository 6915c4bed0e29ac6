# pocketpet/services/session.py
import asyncio
import random
from typing import Optional, Union

import structlog

from pocketpet.core.clock import Clock, SystemClock
from pocketpet.core.settings import Settings, settings as default_settings
from pocketpet.engine.actions import ActionEngine
from pocketpet.engine.context import SimulationContext
from pocketpet.engine.decay import DecayScheduler
from pocketpet.engine.game_time import GameTime
from pocketpet.engine.resolver import ConditionResolver
from pocketpet.models.pet import ItemCategory, PetRecord
from pocketpet.models.status import PetStatusView, build_status
from pocketpet.services.persistence import PetRepository, build_store

log = structlog.get_logger(__name__)


class PetSession:
    """
    One live pet and everything that drives it.

    The host application owns the lifecycle: start() loads the pet and
    starts the background loops, stop() halts them and saves, dispose()
    also releases the store.
    """

    def __init__(self, repository: PetRepository, clock: Optional[Clock] = None,
                 rng: Optional[random.Random] = None, settings: Optional[Settings] = None):
        self.repository = repository
        self.clock = clock or repository.clock
        self.rng = rng or random.Random()
        self.settings = settings or default_settings
        self.context: Optional[SimulationContext] = None
        self.actions: Optional[ActionEngine] = None
        self.decay: Optional[DecayScheduler] = None
        self.game_time: Optional[GameTime] = None
        self._loops = []
        self._running = False

    @classmethod
    async def from_settings(cls, settings: Settings, clock: Optional[Clock] = None,
                            rng: Optional[random.Random] = None) -> "PetSession":
        clock = clock or SystemClock()
        rng = rng or random.Random()
        store = await build_store(settings)
        repository = PetRepository(store, clock, rng, key=settings.STORAGE_KEY, pet_name=settings.DEFAULT_PET_NAME)
        return cls(repository, clock, rng, settings)

    @property
    def record(self) -> PetRecord:
        if self.context is None:
            raise RuntimeError("Pet session not started. Call start() first.")
        return self.context.record

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> PetRecord:
        if self._running:
            return self.record
        record = await self.repository.load()
        self.context = SimulationContext(record, self.clock, ConditionResolver(self.rng), self.rng,
                                         on_commit=self._schedule_save)
        self.actions = ActionEngine(self.context)
        self.decay = DecayScheduler(self.context, self.settings.DECAY_TICK_INTERVAL_SECONDS)
        self.game_time = GameTime(self.clock, self.settings.GAME_MINUTES_PER_SECOND)
        self.context.commit()

        self._loops = [
            asyncio.create_task(self.decay.run(), name="decay-scheduler"),
            asyncio.create_task(self._autosave_loop(), name="autosave"),
        ]
        self._running = True
        log.info("Pet session started.", name=record.name, pet_type=record.pet_type.value,
                 state=record.state.value)
        return record

    async def stop(self):
        if not self._running:
            return
        self._running = False
        for task in self._loops:
            task.cancel()
        await asyncio.gather(*self._loops, return_exceptions=True)
        self._loops = []
        await self.actions.cancel_all()
        await self.context.cancel_all()
        await self.repository.save(self.context.record)
        log.info("Pet session stopped.")

    async def dispose(self):
        await self.stop()
        await self.repository.store.close()
        log.info("Pet session disposed.")

    async def _autosave_loop(self):
        interval = self.settings.AUTOSAVE_INTERVAL_SECONDS
        while True:
            await self.clock.sleep(interval)
            saved = await self.repository.save(self.context.record)
            log.debug("Autosave completed.", saved=saved)

    def _schedule_save(self, record: PetRecord):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            log.debug("No running event loop, deferring save to the next autosave.")
            return
        # Snapshot now so later mutations cannot leak into this write
        self.context.spawn(self.repository.save_snapshot(record.snapshot()), name="save")

    # --- Action API ---

    def feed(self) -> bool:
        return self.actions.feed()

    def play(self) -> bool:
        return self.actions.play()

    def sleep(self) -> bool:
        return self.actions.sleep()

    def clean(self) -> bool:
        return self.actions.clean()

    def give_medicine(self) -> bool:
        return self.actions.give_medicine()

    def send_to_hospital(self) -> bool:
        return self.actions.send_to_hospital()

    def send_on_vacation(self) -> bool:
        return self.actions.send_on_vacation()

    def earn_money(self) -> bool:
        return self.actions.earn_money()

    def purchase(self, item_id: str, category: Union[ItemCategory, str]) -> bool:
        return self.actions.purchase(item_id, category)

    async def reset(self) -> PetRecord:
        await self.actions.cancel_all()
        record = await self.repository.reset()
        self.context.replace_record(record)
        self.context.commit()
        log.info("Pet session reset.", name=record.name, pet_type=record.pet_type.value)
        return record

    def status(self) -> PetStatusView:
        return build_status(self.record, self.clock.now(), self.game_time.is_night, self.game_time.minutes)
