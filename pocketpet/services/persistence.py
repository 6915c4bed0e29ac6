# pocketpet/services/persistence.py
import asyncio
import json
import os
import random
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from pydantic import TypeAdapter

from pocketpet.core.clock import Clock, minutes_between
from pocketpet.core.settings import Settings
from pocketpet.engine.decay import apply_offline_decay
from pocketpet.models.pet import TIMED_STATES, PetRecord, PetStatus, Timestamp, create_new_pet

log = structlog.get_logger(__name__)

LAST_SAVED_FIELD = "lastSaved"
_timestamp = TypeAdapter(Timestamp)


class PetStore(ABC):
    """Key-value storage for serialized pet records."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    async def set(self, key: str, value: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    async def close(self) -> None:
        pass


class MemoryStore(PetStore):
    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = data if data is not None else {}

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self.data.get(key)
        return json.loads(value) if isinstance(value, str) else value

    async def set(self, key: str, value: Dict[str, Any]) -> None:
        self.data[key] = json.dumps(value)

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore(PetStore):
    """All keys live in one JSON object on disk, rewritten atomically on every set."""

    def __init__(self, path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text(encoding="utf-8"))

    def _write_all(self, data: Dict[str, Any]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _set(self, key: str, value: Dict[str, Any]):
        try:
            data = self._read_all()
        except json.JSONDecodeError:
            log.warning("Save file is corrupt, overwriting it.", path=str(self.path))
            data = {}
        data[key] = value
        self._write_all(data)

    def _delete(self, key: str):
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        data = await asyncio.to_thread(self._read_all)
        return data.get(key)

    async def set(self, key: str, value: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)


class MongoStore(PetStore):
    def __init__(self, collection):
        self.collection = collection

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        document = await self.collection.find_one({"key": key})
        if document is None:
            return None
        return document.get("record")

    async def set(self, key: str, value: Dict[str, Any]) -> None:
        await self.collection.update_one(
            {"key": key},
            {"$set": {"key": key, "record": value}},
            upsert=True  # Create if not exists, update if exists
        )

    async def delete(self, key: str) -> None:
        await self.collection.delete_one({"key": key})

    async def close(self) -> None:
        from pocketpet.core.database import close_mongo_connection
        await close_mongo_connection()


async def build_store(settings: Settings) -> PetStore:
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "json":
        return JsonFileStore(settings.SAVE_PATH)
    if backend == "mongo":
        from pocketpet.core.database import connect_to_mongo, get_pets_collection
        await connect_to_mongo(settings)
        return MongoStore(get_pets_collection())
    raise ValueError(f"Unknown storage backend: {settings.STORAGE_BACKEND}")


class PetRepository:
    """Load/save contract for the single pet, including catch-up for time spent offline."""

    def __init__(self, store: PetStore, clock: Clock, rng: Optional[random.Random] = None,
                 key: str = "tamagotchi-pet", pet_name: str = "Buddy"):
        self.store = store
        self.clock = clock
        self.rng = rng or random.Random()
        self.key = key
        self.pet_name = pet_name
        self._write_lock = asyncio.Lock()

    def new_pet(self) -> PetRecord:
        return create_new_pet(self.clock.now(), self.rng, name=self.pet_name)

    async def load(self) -> PetRecord:
        try:
            saved = await self.store.get(self.key)
            if saved is None:
                log.info("No saved pet found, creating a new one.", key=self.key)
                return self.new_pet()
            record, last_saved = self._rehydrate(saved)
            minutes_away = minutes_between(last_saved or record.birth_time, self.clock.now())
            apply_offline_decay(record, minutes_away)
        except Exception as e:
            log.error("Failed to load pet data, starting over.", key=self.key, error=str(e))
            record = self.new_pet()
            await self.save(record)
            return record

        if record.state in TIMED_STATES:
            # Action timers do not survive a restart
            record.transition(PetStatus.IDLE)
        log.info("Pet loaded.", key=self.key, name=record.name, minutes_away=minutes_away)
        return record

    def _rehydrate(self, saved: Dict[str, Any]):
        if not isinstance(saved, dict):
            raise ValueError(f"Saved pet has unexpected type {type(saved).__name__}")
        merged = self.new_pet().snapshot()
        merged.update({field: value for field, value in saved.items() if value is not None})
        record = PetRecord.model_validate(merged)
        last_saved = saved.get(LAST_SAVED_FIELD)
        return record, _timestamp.validate_python(last_saved) if last_saved is not None else None

    async def save(self, record: PetRecord) -> bool:
        return await self.save_snapshot(record.snapshot())

    async def save_snapshot(self, snapshot: Dict[str, Any]) -> bool:
        payload = dict(snapshot)
        payload[LAST_SAVED_FIELD] = self.clock.now().isoformat()
        try:
            async with self._write_lock:  # keep fire-and-forget writes in commit order
                await self.store.set(self.key, payload)
        except Exception as e:
            log.error("Failed to save pet data.", key=self.key, error=str(e))
            return False
        return True

    async def reset(self) -> PetRecord:
        try:
            await self.store.delete(self.key)
        except Exception as e:
            log.error("Failed to discard saved pet.", key=self.key, error=str(e))
        record = self.new_pet()
        await self.save(record)
        log.info("Pet reset.", key=self.key, pet_type=record.pet_type.value)
        return record
