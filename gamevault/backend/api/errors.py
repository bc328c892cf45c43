from typing import Dict, Optional

from fastapi import HTTPException, status

from gamevault.backend.services import ErrorKind, ServiceResult

STATUS_BY_ERROR: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def raise_for_result(
    result: ServiceResult, overrides: Optional[Dict[ErrorKind, int]] = None
) -> None:
    """Turn a failed service result into the matching ``HTTPException``."""
    if result.ok or result.error is None:
        return
    status_code = (overrides or {}).get(result.error, STATUS_BY_ERROR[result.error])
    raise HTTPException(status_code=status_code, detail=result.message)
