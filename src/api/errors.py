"""Mapping of domain errors to RFC 7807 HTTP responses."""

from fastapi import HTTPException, Request

from src.domain.exceptions import ParliamentError


def problem_exception(error: ParliamentError, request: Request) -> HTTPException:
    """Build the HTTPException for a domain error.

    The response body is ``{"detail": {type, title, status, detail,
    instance, ...extensions}}``.
    """
    detail = error.to_rfc7807_dict()
    detail["instance"] = str(request.url)
    return HTTPException(status_code=error.status_code, detail=detail)
