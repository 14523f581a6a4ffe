"""
Test utility functions and assertions.

This module provides helper functions for common testing patterns:
- Response assertions (status codes, error envelopes, pagination)
- Database query helpers
- Cycle path checks
"""

from typing import Iterable, Optional, Type

from httpx import Response
from sqlalchemy import select
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession


# =============================================================================
# Response assertion helpers
# =============================================================================


def assert_status_code(response: Response, expected: int):
    """
    Assert that the response has the expected status code.

    Args:
        response: The HTTP response
        expected: Expected status code

    Raises:
        AssertionError: If status code doesn't match
    """
    assert response.status_code == expected, (
        f"Expected status code {expected}, got {response.status_code}. "
        f"Response body: {response.text}"
    )


def assert_error_code(response: Response, code: str):
    """
    Assert that the response contains a specific error code.

    Args:
        response: The HTTP response
        code: Expected error code

    Raises:
        AssertionError: If error code doesn't match
    """
    data = response.json()
    assert "error" in data, "Response does not contain 'error' field"
    assert data["error"].get("code") == code, (
        f"Expected error code '{code}', got '{data['error'].get('code')}'"
    )


def assert_pagination_structure(
    response: Response, expected_total: Optional[int] = None
):
    """
    Assert that the response has proper pagination structure.

    Args:
        response: The HTTP response
        expected_total: Optional expected total count

    Raises:
        AssertionError: If pagination structure is invalid
    """
    assert_status_code(response, 200)
    data = response.json()

    for field in ("items", "total", "skip", "limit"):
        assert field in data, f"Response missing '{field}' field"

    assert isinstance(data["items"], list), "'items' should be a list"
    assert isinstance(data["total"], int), "'total' should be an integer"

    if expected_total is not None:
        assert data["total"] == expected_total, (
            f"Expected total={expected_total}, got {data['total']}"
        )


def assert_validation_error(response: Response):
    """
    Assert that the response is a 422 request validation error.

    Args:
        response: The HTTP response

    Raises:
        AssertionError: If not a validation error
    """
    assert_status_code(response, 422)
    assert_error_code(response, "VALIDATION_ERROR")


# =============================================================================
# Database query helpers
# =============================================================================


async def get_record_by_id(
    session: AsyncSession, model_class: Type[SQLModel], record_id: int
) -> Optional[SQLModel]:
    """
    Get a record by its ID, including soft deleted rows.

    Args:
        session: Database session
        model_class: SQLModel class
        record_id: ID of the record

    Returns:
        The record if found, None otherwise
    """
    result = await session.execute(
        select(model_class).where(model_class.id == record_id)
    )
    return result.scalar_one_or_none()


# =============================================================================
# Graph helpers
# =============================================================================


def assert_valid_cycle(path: list[int], edges: Iterable[tuple[int, int]]):
    """
    Assert that ``path`` is a closed walk over ``edges``.

    Args:
        path: Cycle as [c0, c1, ..., c0]
        edges: (predecessor_id, successor_id) pairs

    Raises:
        AssertionError: If the path is empty, open, or uses a missing edge
    """
    assert path, "Cycle path is empty"
    assert path[0] == path[-1], f"Cycle path is not closed: {path}"

    edge_set = set(edges)
    for predecessor_id, successor_id in zip(path, path[1:]):
        assert (predecessor_id, successor_id) in edge_set, (
            f"Cycle path step {predecessor_id} -> {successor_id} is not an edge"
        )
