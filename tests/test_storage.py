"""
Tests for the local JSON store.
"""
import json
import os
import threading

import pytest

from novacoach.models.profile import UserProfile
from novacoach.services.storage import STORAGE_KEYS, JsonStore


@pytest.fixture
def store(tmp_path):
    return JsonStore(str(tmp_path / "data" / "store.json"))


class TestProfile:

    def test_seeded_with_default_profile(self, store):
        profile = store.get_user_profile()
        assert profile.name == "بطل نوفا"
        assert profile.points == 1250
        assert store.get(STORAGE_KEYS["INITIALIZED"]) is True

    def test_save_and_reload(self, store, tmp_path):
        store.save_user_profile(UserProfile(name="Omar", age=31, equipment="full_gym"))

        reloaded = JsonStore(store.path).get_user_profile()

        assert reloaded.name == "Omar"
        assert reloaded.age == "31"
        assert reloaded.equipment == "full_gym"

    def test_existing_store_not_reseeded(self, store):
        store.save_user_profile(UserProfile(name="Lina"))
        assert JsonStore(store.path).get_user_profile().name == "Lina"


class TestPlans:

    def test_save_plan_is_newest_first_and_active(self, store, sample_plan_payload):
        first = store.save_plan({**sample_plan_payload, "title": "A"})
        second = store.save_plan({**sample_plan_payload, "title": "B"})

        plans = store.list_saved_plans()
        assert [p["title"] for p in plans] == ["B", "A"]
        assert store.get_active_plan()["title"] == "B"
        assert first["id"] and second["date"]

    def test_delete_plan(self, store, sample_plan_payload):
        saved = store.save_plan(sample_plan_payload)
        assert store.delete_plan(saved["id"]) is True
        assert store.delete_plan(saved["id"]) is False
        assert store.list_saved_plans() == []


class TestWorkoutLogs:

    def test_log_awards_points(self, store):
        before = store.get_user_profile()

        profile = store.append_workout_log("ex-12", duration=45)

        assert profile.completedWorkouts == before.completedWorkouts + 1
        assert profile.points == before.points + 54
        logs = store.list_workout_logs()
        assert logs[-1]["exerciseId"] == "ex-12"
        assert logs[-1]["duration"] == 45

    def test_file_is_valid_json(self, store):
        store.append_workout_log("ex-1")
        with open(store.path, encoding="utf-8") as f:
            data = json.load(f)
        assert len(data[STORAGE_KEYS["LOGS"]]) == 1


class TestConcurrency:

    def test_concurrent_writes_from_threads(self, store):
        """Request handlers share one store across the threadpool."""
        errors = []

        def worker(n):
            try:
                for i in range(50):
                    store.set(f"key-{n}", i)
                    store.append_workout_log(f"ex-{n}")
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        reloaded = JsonStore(store.path)
        assert len(reloaded.list_workout_logs()) == 8 * 50
        assert all(reloaded.get(f"key-{n}") == 49 for n in range(8))
        leftovers = [name for name in os.listdir(os.path.dirname(store.path)) if name.endswith(".tmp")]
        assert leftovers == []
