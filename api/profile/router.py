import logging

from fastapi import APIRouter, Depends, HTTPException

from api.profile.schemas import EducationRequest, ExperienceRequest, MessageResponse, ProfileUpsertRequest
from api.security import get_current_user_id
from errors import ProfileNotFound, UpstreamNotFound, UpstreamUnavailable
from . import service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile")

SERVER_ERROR = "Server error"


def _not_found(exc: ProfileNotFound) -> HTTPException:
    logger.info("Profile lookup missed: %s", exc.message)
    return HTTPException(status_code=400, detail={"msg": exc.message})


def _server_error(action: str) -> HTTPException:
    logger.exception("Failed to %s", action)
    return HTTPException(status_code=500, detail=SERVER_ERROR)


@router.get("/me")
def get_own_profile_route(user_id: str = Depends(get_current_user_id)):
    try:
        return service.get_profile_by_owner(user_id)
    except ProfileNotFound as exc:
        raise _not_found(exc) from exc
    except Exception as exc:
        raise _server_error("load own profile") from exc


@router.post("")
def upsert_profile_route(request: ProfileUpsertRequest, user_id: str = Depends(get_current_user_id)):
    try:
        return service.upsert_profile(user_id, request.model_dump(exclude_none=True))
    except Exception as exc:
        raise _server_error("save profile") from exc


@router.get("")
def list_profiles_route():
    try:
        return service.list_profiles()
    except Exception as exc:
        raise _server_error("list profiles") from exc


@router.get("/user/{user_id}")
def get_profile_by_user_route(user_id: str):
    try:
        return service.get_profile_by_user_id(user_id)
    except ProfileNotFound as exc:
        raise _not_found(exc) from exc
    except Exception as exc:
        raise _server_error("load profile") from exc


@router.delete("", response_model=MessageResponse)
def delete_profile_route(user_id: str = Depends(get_current_user_id)):
    try:
        service.delete_owner(user_id)
        return MessageResponse(msg="User deleted")
    except Exception as exc:
        raise _server_error("delete user") from exc


@router.put("/experience")
def add_experience_route(request: ExperienceRequest, user_id: str = Depends(get_current_user_id)):
    try:
        return service.add_history_entry(user_id, "experience", request.model_dump(by_alias=True, exclude_none=True))
    except ProfileNotFound as exc:
        raise _not_found(exc) from exc
    except Exception as exc:
        raise _server_error("add experience") from exc


@router.delete("/experience/{exp_id}")
def remove_experience_route(exp_id: str, user_id: str = Depends(get_current_user_id)):
    try:
        return service.remove_history_entry(user_id, "experience", exp_id)
    except ProfileNotFound as exc:
        raise _not_found(exc) from exc
    except Exception as exc:
        raise _server_error("remove experience") from exc


@router.put("/education")
def add_education_route(request: EducationRequest, user_id: str = Depends(get_current_user_id)):
    try:
        return service.add_history_entry(user_id, "education", request.model_dump(by_alias=True, exclude_none=True))
    except ProfileNotFound as exc:
        raise _not_found(exc) from exc
    except Exception as exc:
        raise _server_error("add education") from exc


@router.delete("/education/{edu_id}")
def remove_education_route(edu_id: str, user_id: str = Depends(get_current_user_id)):
    try:
        return service.remove_history_entry(user_id, "education", edu_id)
    except ProfileNotFound as exc:
        raise _not_found(exc) from exc
    except Exception as exc:
        raise _server_error("remove education") from exc


@router.get("/github/{username}")
def github_repos_route(username: str):
    try:
        return service.fetch_github_repos(username)
    except UpstreamNotFound as exc:
        raise HTTPException(status_code=404, detail={"msg": exc.message}) from exc
    except UpstreamUnavailable as exc:
        logger.warning("GitHub unavailable for username=%s: %s", username, exc)
        raise HTTPException(status_code=502, detail={"msg": "GitHub is unavailable"}) from exc
    except Exception as exc:
        raise _server_error("fetch GitHub repos") from exc
