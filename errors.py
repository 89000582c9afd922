class ProfileServiceError(Exception):
    """Base class for errors raised by the profile service."""


class ProfileNotFound(ProfileServiceError):
    def __init__(self, message: str = "There is no profile for this user") -> None:
        super().__init__(message)
        self.message = message


class ValidationFailed(ProfileServiceError):
    """Request input is missing required fields.

    ``errors`` holds every violation as ``{"msg": ..., "param": ...}``.
    """

    def __init__(self, errors: list[dict[str, str]]) -> None:
        super().__init__(f"{len(errors)} validation error(s)")
        self.errors = errors


class UpstreamNotFound(ProfileServiceError):
    def __init__(self, message: str = "No Github profile found") -> None:
        super().__init__(message)
        self.message = message


class UpstreamUnavailable(ProfileServiceError):
    pass


class StoreFailure(ProfileServiceError):
    pass
