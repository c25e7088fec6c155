"""Map backup engine errors to HTTP errors."""

from fastapi import HTTPException

from mongo_lifecycle._storage import ClusterNotFoundError
from mongo_lifecycle.backup import BackupNotFoundError, InvalidTriggerPatternError, ManifestError

# Engine errors with a client-facing meaning; anything else is a 500
CLIENT_ERRORS = (BackupNotFoundError, ClusterNotFoundError, InvalidTriggerPatternError, ManifestError)


def to_http_error(error: Exception) -> HTTPException:
    if isinstance(error, InvalidTriggerPatternError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, ManifestError):
        return HTTPException(status_code=422, detail=str(error))
    return HTTPException(status_code=404, detail=str(error))
