from pydantic import BaseModel, ConfigDict, Field


# Error types that mean a field was left out or left empty.
REQUIRED_ERROR_TYPES = {"missing", "string_too_short"}

REQUIRED_FIELD_MESSAGES = {
    "status": "Status is required",
    "skills": "Skills is required",
    "title": "Title is required",
    "company": "Company is required",
    "school": "School is required",
    "degree": "Degree is required",
    "fieldofstudy": "Field of study is required",
    "from": "From date is required",
}


class ProfileUpsertRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str = Field(..., min_length=1)
    skills: str = Field(..., min_length=1, description="Comma-separated list of skills")
    company: str | None = None
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    githubusername: str | None = None
    youtube: str | None = None
    facebook: str | None = None
    twitter: str | None = None
    instagram: str | None = None
    linkedin: str | None = None


class ExperienceRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: str | None = None
    from_: str = Field(..., alias="from", min_length=1)
    to: str | None = None
    current: bool = False
    description: str | None = None


class EducationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    school: str = Field(..., min_length=1)
    degree: str = Field(..., min_length=1)
    fieldofstudy: str = Field(..., min_length=1)
    from_: str = Field(..., alias="from", min_length=1)
    to: str | None = None
    current: bool = False
    description: str | None = None


class MessageResponse(BaseModel):
    msg: str


def collect_validation_errors(errors: list[dict]) -> list[dict[str, str]]:
    """Turn pydantic request errors into ``{"msg", "param"}`` pairs, one per field."""
    collected: list[dict[str, str]] = []
    seen: set[str] = set()
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        param = loc[0] if loc else "body"
        if param in seen:
            continue
        seen.add(param)
        msg = error.get("msg", "Invalid value")
        if error.get("type") in REQUIRED_ERROR_TYPES:
            msg = REQUIRED_FIELD_MESSAGES.get(param, msg)
        collected.append({"msg": msg, "param": param})
    return collected
