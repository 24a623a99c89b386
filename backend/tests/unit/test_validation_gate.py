"""
Tests for the validate(schema, section) request gate
"""
import json
import logging

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from core.exceptions import ValidationException, api_exception_handler
from core.middleware import CorrelationIdMiddleware, validate


class Widget(BaseModel):
    name: str = Field(..., min_length=2)
    size: int = Field(..., gt=0)


class Paging(BaseModel):
    limit: int = 10


@pytest.fixture
def client():
    app = FastAPI()
    app.add_middleware(CorrelationIdMiddleware)
    app.add_exception_handler(ValidationException, api_exception_handler)

    @app.post("/widgets")
    async def create_widget(widget: Widget = Depends(validate(Widget))):
        return {"widget": widget.model_dump()}

    @app.get("/widgets")
    async def list_widgets(paging: Paging = Depends(validate(Paging, "query"))):
        return {"limit": paging.limit}

    with TestClient(app) as test_client:
        yield test_client


class TestValidationGate:

    def test_valid_body_is_coerced_and_unknown_keys_dropped(self, client):
        response = client.post("/widgets", json={"name": "gear", "size": "3", "admin": True})

        assert response.status_code == 200
        assert response.json() == {"widget": {"name": "gear", "size": 3}}

    def test_invalid_body_lists_every_field(self, client):
        response = client.post("/widgets", json={"name": "g", "size": 0}, headers={"X-Correlation-ID": "corr-v"})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["message"] == "Validation failed"
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["correlation_id"] == "corr-v"
        assert {error["field"] for error in data["errors"]} == {"name", "size"}
        assert all(error["message"] for error in data["errors"])

    def test_missing_body(self, client):
        response = client.post("/widgets")

        assert response.status_code == 400
        assert {error["field"] for error in response.json()["errors"]} == {"name", "size"}

    def test_malformed_json(self, client):
        response = client.post("/widgets", content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "body", "message": "Request body must be valid JSON"}]

    def test_query_section(self, client):
        assert client.get("/widgets", params={"limit": "5"}).json() == {"limit": 5}
        assert client.get("/widgets", params={"limit": "lots"}).status_code == 400

    def test_failure_is_logged_with_correlation_id(self, client, caplog):
        with caplog.at_level(logging.WARNING, logger="core.middleware.validation"):
            client.post("/widgets", json={"name": "g", "size": 1}, headers={"X-Correlation-ID": "corr-log"})

        entries = [json.loads(record.getMessage()) for record in caplog.records
                   if record.name == "core.middleware.validation"]
        assert entries[0]["message"] == "Validation failed"
        assert entries[0]["correlation_id"] == "corr-log"
        assert entries[0]["metadata"]["errors"][0]["field"] == "name"

    def test_unknown_section_is_rejected(self):
        with pytest.raises(ValueError):
            validate(Widget, "headers")
