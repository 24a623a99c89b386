"""
Response utility for consistent API responses
"""
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class Response(JSONResponse):
    """
    Standardized API response wrapper: {success, data, message}.
    Mutating endpoints also report the outcome of the domain event they
    emitted under "event" (success / degraded).
    """

    def __init__(
        self,
        success: bool = True,
        data: Any = None,
        message: str = "Success",
        status_code: int = status.HTTP_200_OK,
        event: Optional[str] = None,
        errors: Optional[list] = None,
        **kwargs
    ):
        response_data = {
            "success": success,
            "data": self._serialize_data(data),
            "message": message
        }

        if event:
            response_data["event"] = event

        if errors:
            response_data["errors"] = errors

        super().__init__(
            content=response_data,
            status_code=status_code,
            **kwargs
        )

    def _serialize_data(self, data: Any) -> Any:
        """
        Convert Pydantic models and other non-serializable objects to JSON-serializable format
        """
        if data is None:
            return None
        elif isinstance(data, BaseModel):
            return data.model_dump(mode='json')
        elif isinstance(data, Enum):
            return data.value
        elif isinstance(data, UUID):
            return str(data)
        elif isinstance(data, (datetime, date)):
            return data.isoformat()
        elif isinstance(data, (list, tuple)):
            return [self._serialize_data(item) for item in data]
        elif isinstance(data, dict):
            return {key: self._serialize_data(value) for key, value in data.items()}
        else:
            return data

    @staticmethod
    def success(
        data: Any = None,
        message: str = "Success",
        status_code: int = status.HTTP_200_OK,
        event: Optional[str] = None,
        headers: Optional[dict] = None,
    ) -> "Response":
        return Response(
            success=True,
            data=data,
            message=message,
            status_code=status_code,
            event=event,
            headers=headers,
        )
