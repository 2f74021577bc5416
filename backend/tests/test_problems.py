"""
Tests for the problems endpoints.
"""

import pytest
from httpx import AsyncClient

from tests.factories import create_test_experiment, create_test_problem, create_test_research


@pytest.mark.asyncio
async def test_create_problem(client: AsyncClient, api_prefix: str):
    response = await client.post(f"{api_prefix}/problems", json={"brief": "Users abandon checkout"})

    assert response.status_code == 201
    data = response.json()
    assert data["brief"] == "Users abandon checkout"
    assert data["isInvestigate"] is False
    assert data["research"] == []
    assert data["experiments"] == []
    assert isinstance(data["id"], int)
    assert "createdAt" in data


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"brief": ""}, {"brief": "   "}, {"brief": None}])
async def test_create_problem_rejects_missing_brief(client: AsyncClient, api_prefix: str, body):
    response = await client.post(f"{api_prefix}/problems", json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"

    listing = await client.get(f"{api_prefix}/problems")
    assert listing.json() == []


@pytest.mark.asyncio
async def test_list_problems(client: AsyncClient, db_session, api_prefix: str):
    first = await create_test_problem(db_session, brief="First")
    second = await create_test_problem(db_session, brief="Second")

    response = await client.get(f"{api_prefix}/problems")

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [first.id, second.id]


@pytest.mark.asyncio
async def test_list_problems_to_investigate(client: AsyncClient, db_session, api_prefix: str):
    await create_test_problem(db_session, brief="Idle")
    flagged = await create_test_problem(db_session, brief="Flagged", is_investigate=True)

    response = await client.get(f"{api_prefix}/problems/investigate")

    assert response.status_code == 200
    data = response.json()
    assert [p["id"] for p in data] == [flagged.id]
    assert all(p["isInvestigate"] for p in data)


@pytest.mark.asyncio
async def test_get_problem_includes_children(client: AsyncClient, db_session, api_prefix: str):
    problem = await create_test_problem(db_session)
    research = await create_test_research(db_session, problem, is_approved=True)
    experiment = await create_test_experiment(db_session, problem)

    response = await client.get(f"{api_prefix}/problems/{problem.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["research"][0]["id"] == research.id
    assert data["research"][0]["isApproved"] is True
    assert data["experiments"][0]["id"] == experiment.id
    assert data["experiments"][0]["status"] == "NOT STARTED"


@pytest.mark.asyncio
async def test_get_problem_not_found(client: AsyncClient, api_prefix: str):
    response = await client.get(f"{api_prefix}/problems/999")

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "ProblemNotFoundError"
    assert body["status_code"] == 404


@pytest.mark.asyncio
async def test_get_problem_non_numeric_id(client: AsyncClient, api_prefix: str):
    response = await client.get(f"{api_prefix}/problems/abc")

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["PUT", "PATCH"])
async def test_update_problem_is_partial(client: AsyncClient, db_session, api_prefix: str, method):
    problem = await create_test_problem(db_session, brief="Original brief")

    response = await client.request(
        method, f"{api_prefix}/problems/{problem.id}", json={"isInvestigate": True}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["isInvestigate"] is True
    assert data["brief"] == "Original brief"


@pytest.mark.asyncio
async def test_update_problem_brief_and_related(client: AsyncClient, db_session, api_prefix: str):
    problem = await create_test_problem(db_session)

    response = await client.patch(
        f"{api_prefix}/problems/{problem.id}",
        json={"brief": "Checkout drop-off on mobile", "relatedExperiments": ["exp-7"]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["brief"] == "Checkout drop-off on mobile"
    assert data["relatedExperiments"] == ["exp-7"]
    assert data["isInvestigate"] is False


@pytest.mark.asyncio
async def test_update_problem_rejects_blank_brief(client: AsyncClient, db_session, api_prefix: str):
    problem = await create_test_problem(db_session, brief="Keep me")

    response = await client.patch(f"{api_prefix}/problems/{problem.id}", json={"brief": "  "})

    assert response.status_code == 400
    current = await client.get(f"{api_prefix}/problems/{problem.id}")
    assert current.json()["brief"] == "Keep me"


@pytest.mark.asyncio
async def test_update_problem_not_found_creates_nothing(client: AsyncClient, api_prefix: str):
    """Updating an unknown problem is a 404 and leaves the store empty."""
    response = await client.patch(f"{api_prefix}/problems/999", json={"isInvestigate": True})

    assert response.status_code == 404
    listing = await client.get(f"{api_prefix}/problems")
    assert listing.json() == []


@pytest.mark.asyncio
async def test_delete_problem_cascades(client: AsyncClient, db_session, api_prefix: str):
    problem = await create_test_problem(db_session)
    await create_test_research(db_session, problem)
    await create_test_experiment(db_session, problem)

    response = await client.delete(f"{api_prefix}/problems/{problem.id}")

    assert response.status_code == 200
    assert response.json()["message"] == "Problem deleted successfully"

    assert (await client.get(f"{api_prefix}/problems/{problem.id}")).status_code == 404
    assert (await client.get(f"{api_prefix}/problems/{problem.id}/research")).json() == []
    assert (await client.get(f"{api_prefix}/problems/{problem.id}/experiments")).json() == []


@pytest.mark.asyncio
async def test_delete_problem_not_found(client: AsyncClient, api_prefix: str):
    response = await client.delete(f"{api_prefix}/problems/999")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_correlation_id_round_trip(client: AsyncClient, api_prefix: str):
    response = await client.get(f"{api_prefix}/problems", headers={"X-Correlation-ID": "abc-123"})

    assert response.headers["X-Correlation-ID"] == "abc-123"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
