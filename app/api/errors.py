from fastapi import HTTPException, status

from app.services.exceptions import ValidationFailedError


def validation_error(e: ValidationFailedError) -> HTTPException:
    """Turn every failed rule into a 422 detail entry: field, rule, message."""
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=[error._asdict() for error in e.errors]
    )
