from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from imagejobs.jobs.models import Progress
from imagejobs.main import app
from imagejobs.storage.status_store import JobStatusStore


@pytest.mark.anyio
async def test_health_check(async_client: AsyncClient) -> None:
  response = await async_client.get("/health")
  assert response.status_code == 200
  assert response.json()["status"] == "ok"


@pytest.mark.anyio
async def test_status_endpoint_returns_wire_shape(async_client: AsyncClient, store: JobStatusStore) -> None:
  await store.mark_queued("text-to-image", "abc")
  await store.mark_in_progress("text-to-image", "abc", Progress(current_sample=1, progress_value=0.5, total_samples=2))

  response = await async_client.get("/v1/jobs/text-to-image/abc")

  assert response.status_code == 200
  assert response.json() == {
    "status": "IN_PROGRESS",
    "resultUrl": "text-to-image/abc",
    "images": [{"url": "text-to-image/abc/1.png", "progress": 0.5}, {"url": "text-to-image/abc/2.png", "progress": 0}],
  }


@pytest.mark.anyio
async def test_status_endpoint_reports_queued_job(async_client: AsyncClient, store: JobStatusStore) -> None:
  await store.mark_queued("inpaint-image", "xyz")

  response = await async_client.get("/v1/jobs/inpaint-image/xyz")

  assert response.status_code == 200
  assert response.json() == {"status": "QUEUED", "resultUrl": "inpaint-image/xyz", "images": []}


@pytest.mark.anyio
async def test_status_endpoint_returns_404_for_unknown_job(async_client: AsyncClient) -> None:
  response = await async_client.get("/v1/jobs/text-to-image/missing")

  assert response.status_code == 404
  assert response.json() == {"detail": "Job not found."}


@pytest.mark.anyio
async def test_storage_failure_surfaces_as_server_error(async_client: AsyncClient, store: JobStatusStore) -> None:
  await store.close()

  response = await async_client.get("/v1/jobs/text-to-image/abc")

  assert response.status_code == 500
  assert response.json() == {"detail": "Job storage unavailable"}


@pytest.mark.anyio
async def test_status_endpoint_without_store_is_unavailable() -> None:
  app.dependency_overrides.clear()
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    response = await client.get("/v1/jobs/text-to-image/abc")

  assert response.status_code == 503
