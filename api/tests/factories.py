"""
Factory Boy factories for generating test data.

These factories provide an alternative to the fixture-based factories in conftest.py.
They build instances without database persistence (using .build()), which is
what the pure graph tests need.

Usage examples:
    # Create instance without saving to DB
    task = TaskFactory.build()

    # An edge meaning "task 2 depends on task 1"
    edge = TaskDependencyFactory.build(predecessor_id=1, successor_id=2)
"""

from datetime import datetime

import factory
from faker import Faker

from teamtasks.models import Task, TaskDependency

fake = Faker()


class TaskFactory(factory.Factory):
    """Factory for Task model."""

    class Meta:
        model = Task

    id = factory.Sequence(lambda n: n + 1)
    team_id = factory.LazyFunction(lambda: fake.random_int(min=1, max=5))
    title = factory.Faker("sentence", nb_words=4)
    description = factory.Faker("text", max_nb_chars=200)
    status = factory.Iterator(["pending", "in_progress", "completed", "cancelled"])
    priority = factory.Iterator(["low", "medium", "high"])
    created_at = factory.LazyFunction(datetime.now)
    updated_at = factory.LazyFunction(datetime.now)
    deleted_at = None


class TaskDependencyFactory(factory.Factory):
    """Factory for TaskDependency model."""

    class Meta:
        model = TaskDependency

    id = factory.Sequence(lambda n: n + 1)
    successor_id = None  # Required (must be provided)
    predecessor_id = None  # Required (must be provided)
    kind = "finish_to_start"
    created_at = factory.LazyFunction(datetime.now)
    deleted_at = None


# =============================================================================
# Helper functions for common test data scenarios
# =============================================================================


def build_edges(*pairs: tuple[int, int]) -> list[TaskDependency]:
    """
    Build unpersisted live edges from (predecessor_id, successor_id) pairs.

    Returns:
        List of TaskDependency instances (not persisted to DB).
    """
    return [
        TaskDependencyFactory.build(predecessor_id=predecessor, successor_id=successor)
        for predecessor, successor in pairs
    ]


def build_chain_edges(length: int) -> list[TaskDependency]:
    """
    Build edges for a linear chain 1 -> 2 -> ... -> length.

    Returns:
        List of TaskDependency instances (not persisted to DB).
    """
    return build_edges(*[(i, i + 1) for i in range(1, length)])
