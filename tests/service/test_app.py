"""Tests for the FastAPI service mode."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from schemagen.config import RunParams
from schemagen.models import PackageResult, RunReport
from schemagen.orchestrator import AggregateRunError
from schemagen.service.app import create_app


class _StubOrchestrator:
    def __init__(self, error_count: int = 0) -> None:
        self.error_count = error_count
        self.calls: list[RunParams] = []

    def run(self, params: RunParams | None = None) -> RunReport:
        self.calls.append(params)
        if self.error_count:
            raise AggregateRunError(self.error_count)
        return RunReport(
            packages=[
                PackageResult(package_name="compute/resource-manager", result="succeeded"),
                PackageResult(package_name="network/resource-manager", result="failed"),
            ]
        )


@pytest.fixture
def orchestrator() -> _StubOrchestrator:
    return _StubOrchestrator()


@pytest.fixture
def client(orchestrator: _StubOrchestrator) -> TestClient:
    return TestClient(create_app(lambda: orchestrator))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_generate_all_returns_report(client: TestClient, orchestrator: _StubOrchestrator) -> None:
    response = client.post(
        "/generate-all",
        json={"batchCount": 4, "batchIndex": 1, "outputPath": "report.json"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "packages": [
            {"packageName": "compute/resource-manager", "result": "succeeded", "path": ["schemas"]},
            {"packageName": "network/resource-manager", "result": "failed", "path": ["schemas"]},
        ]
    }
    params = orchestrator.calls[0]
    assert (params.batch_count, params.batch_index, params.output_path) == (4, 1, "report.json")


def test_generate_all_rejects_invalid_shard(client: TestClient, orchestrator: _StubOrchestrator) -> None:
    response = client.post("/generate-all", json={"batchCount": 2, "batchIndex": 5})

    assert response.status_code == 400
    assert "batchIndex" in response.json()["detail"]
    assert orchestrator.calls == []


def test_generate_all_maps_aggregate_failure() -> None:
    client = TestClient(create_app(lambda: _StubOrchestrator(error_count=3)))

    response = client.post("/generate-all", json={})

    assert response.status_code == 500
    assert response.json() == {
        "detail": "Autogeneration failed with 3 errors. See logs for detailed information.",
        "errorCount": 3,
    }


def test_generate_all_rejects_unknown_keys(client: TestClient, orchestrator: _StubOrchestrator) -> None:
    response = client.post("/generate-all", json={"bogus": 1})

    assert response.status_code == 400
    assert "bogus" in response.json()["detail"]
    assert orchestrator.calls == []
