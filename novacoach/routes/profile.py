"""
Profile, saved plan and workout log routes.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from novacoach.core.auth import verify_internal_secret
from novacoach.core.dependencies import get_store
from novacoach.core.logger import log_request
from novacoach.models.profile import UserProfile
from novacoach.models.schemas import SavePlanRequest, WorkoutLogRequest
from novacoach.services.storage import JsonStore

router = APIRouter(dependencies=[Depends(verify_internal_secret)])

Store = Annotated[JsonStore, Depends(get_store)]


@router.get("/profile")
def get_profile(store: Store):
    return store.get_user_profile()


@router.put("/profile")
def save_profile(profile: UserProfile, store: Store):
    log_request("/profile", "PUT")
    return store.save_user_profile(profile)


@router.get("/plans")
def list_plans(store: Store):
    return {"plans": store.list_saved_plans(), "active": store.get_active_plan()}


@router.post("/plans")
def save_plan(req: SavePlanRequest, store: Store):
    """Archive a generated plan and make it the active one."""
    log_request("/plans")
    saved = store.save_plan({**req.plan.model_dump(), "sport": req.sport.name})
    return {"status": "success", "plan": saved}


@router.delete("/plans/{plan_id}")
def delete_plan(plan_id: str, store: Store):
    log_request(f"/plans/{plan_id}", "DELETE")
    if not store.delete_plan(plan_id):
        raise HTTPException(status_code=404, detail="Plan not found")
    return {"status": "success"}


@router.get("/workout-logs")
def list_workout_logs(store: Store):
    return {"logs": store.list_workout_logs()}


@router.post("/workout-logs")
def log_workout(req: WorkoutLogRequest, store: Store):
    """Record a completed workout; awards points on the profile."""
    log_request("/workout-logs")
    profile = store.append_workout_log(req.exerciseId, req.duration)
    return {"status": "success", "profile": profile}
