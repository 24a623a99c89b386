"""
Request validation gate.

`validate(schema, section)` is a FastAPI dependency: the chosen request
section is parsed into `schema`, unknown keys are dropped, and the route
receives the sanitized model. Failures become a 400 ValidationException
listing every offending field.
"""
from typing import Any, Callable, Dict, List, Type

from fastapi import Request
from pydantic import BaseModel, ValidationError

from core.exceptions import ValidationException
from core.logging import get_structured_logger
from core.utils.correlation import get_correlation_id

logger = get_structured_logger(__name__)

SECTIONS = ("body", "query", "params")


def format_validation_errors(exc: ValidationError) -> List[Dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]) or "body",
            "message": error["msg"],
        }
        for error in exc.errors()
    ]


async def _read_section(request: Request, section: str) -> Any:
    if section == "query":
        return dict(request.query_params)
    if section == "params":
        return dict(request.path_params)
    body = await request.body()
    if not body:
        return {}
    try:
        return await request.json()
    except ValueError:
        raise ValidationException(
            errors=[{"field": "body", "message": "Request body must be valid JSON"}],
            correlation_id=get_correlation_id(request),
        )


def validate(schema: Type[BaseModel], section: str = "body") -> Callable:
    if section not in SECTIONS:
        raise ValueError(f"section must be one of {SECTIONS}, got {section!r}")

    async def dependency(request: Request) -> BaseModel:
        correlation_id = get_correlation_id(request)
        raw = await _read_section(request, section)
        try:
            model = schema.model_validate(raw)
        except ValidationError as e:
            errors = format_validation_errors(e)
            logger.warning(
                "Validation failed",
                correlation_id=correlation_id,
                metadata={
                    "path": request.url.path,
                    "section": section,
                    "schema": schema.__name__,
                    "errors": errors,
                },
            )
            raise ValidationException(errors=errors, correlation_id=correlation_id)

        if not hasattr(request.state, "validated"):
            request.state.validated = {}
        request.state.validated[section] = model
        return model

    return dependency
