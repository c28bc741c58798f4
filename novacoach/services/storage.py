"""
Local persistence for the athlete profile, saved plans and workout logs.

A single JSON file acting as a key-value store with an in-memory cache.
Last write wins; no transactions. Request threads share one store, so every
read-modify-write runs under the store's lock.
"""
import json
import os
import tempfile
import threading
import time
from datetime import datetime, timezone
from typing import Any, Optional

from novacoach.core.config import settings
from novacoach.core.logger import logger
from novacoach.models.profile import DEFAULT_PROFILE, UserProfile


STORAGE_KEYS = {
    "USER": "nova_user_profile",
    "PLANS": "nova_saved_plans",
    "ACTIVE_PLAN": "nova_active_plan",
    "LOGS": "nova_workout_logs",
    "INITIALIZED": "nova_db_initialized",
}

# Points awarded per logged workout, plus one per ten minutes trained.
WORKOUT_BASE_POINTS = 50


class JsonStore:
    def __init__(self, path: Optional[str] = None):
        self.path = path or settings.STORE_PATH
        self._cache: Optional[dict[str, Any]] = None
        self._lock = threading.RLock()

    # --- raw key-value access ---

    def _load(self) -> dict[str, Any]:
        with self._lock:
            if self._cache is None:
                if os.path.exists(self.path):
                    with open(self.path, "r", encoding="utf-8") as f:
                        self._cache = json.load(f)
                else:
                    self._cache = {}
                self._seed()
            return self._cache

    def _seed(self) -> None:
        if self._cache.get(STORAGE_KEYS["INITIALIZED"]):
            return
        logger.info("Seeding local store with the default profile")
        self._cache[STORAGE_KEYS["USER"]] = DEFAULT_PROFILE.model_dump()
        self._cache.setdefault(STORAGE_KEYS["PLANS"], [])
        self._cache.setdefault(STORAGE_KEYS["LOGS"], [])
        self._cache[STORAGE_KEYS["INITIALIZED"]] = True
        self._flush()

    def _flush(self) -> None:
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=directory, prefix=".store-", suffix=".tmp", delete=False
        ) as f:
            json.dump(self._cache, f, ensure_ascii=False, indent=2)
        os.replace(f.name, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._load()[key] = value
            self._flush()

    # --- profile ---

    def get_user_profile(self) -> UserProfile:
        return UserProfile.model_validate(self.get(STORAGE_KEYS["USER"]) or {})

    def save_user_profile(self, profile: UserProfile) -> UserProfile:
        self.set(STORAGE_KEYS["USER"], profile.model_dump())
        return profile

    # --- plans ---

    def list_saved_plans(self) -> list[dict]:
        return list(self.get(STORAGE_KEYS["PLANS"]) or [])

    def get_active_plan(self) -> Optional[dict]:
        return self.get(STORAGE_KEYS["ACTIVE_PLAN"])

    def save_plan(self, plan: dict) -> dict:
        """Store a plan newest-first, assign id and date, and make it active."""
        saved = {
            **plan,
            "id": str(int(time.time() * 1000)),
            "date": datetime.now(timezone.utc).date().isoformat(),
        }
        with self._lock:
            plans = self.list_saved_plans()
            plans.insert(0, saved)
            self.set(STORAGE_KEYS["PLANS"], plans)
            self.set(STORAGE_KEYS["ACTIVE_PLAN"], saved)
        return saved

    def delete_plan(self, plan_id: str) -> bool:
        with self._lock:
            plans = self.list_saved_plans()
            remaining = [p for p in plans if p.get("id") != plan_id]
            self.set(STORAGE_KEYS["PLANS"], remaining)
        return len(remaining) != len(plans)

    # --- workout logs ---

    def list_workout_logs(self) -> list[dict]:
        return list(self.get(STORAGE_KEYS["LOGS"]) or [])

    def append_workout_log(self, exercise_id: str, duration: int = 0) -> UserProfile:
        """Record a completed workout and award points. Returns the updated profile."""
        with self._lock:
            profile = self.get_user_profile()
            profile = profile.model_copy(update={
                "completedWorkouts": profile.completedWorkouts + 1,
                "points": profile.points + WORKOUT_BASE_POINTS + duration // 10,
            })
            self.save_user_profile(profile)

            logs = self.list_workout_logs()
            logs.append({
                "exerciseId": exercise_id,
                "date": datetime.now(timezone.utc).isoformat(),
                "duration": duration,
            })
            self.set(STORAGE_KEYS["LOGS"], logs)
        return profile
