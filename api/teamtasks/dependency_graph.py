"""Task precedence graph: construction, cycle detection and reachability.

Graphs are plain adjacency maps from a predecessor task ID to the ordered list
of successor task IDs. They are rebuilt from the live edge set on every call
and never cached.

All traversals are iterative.
"""

from typing import Any, Dict, Iterable, List, Optional, Set

from teamtasks.schemas.dependency_results import ValidationResult

Graph = Dict[int, List[int]]

SELF_DEPENDENCY_ERROR = "Task cannot depend on itself"
CIRCULAR_DEPENDENCY_ERROR = "Circular dependency detected"


def build_dependency_graph(
    edges: Iterable[Any], task_ids: Iterable[int] = ()
) -> Graph:
    """Build a predecessor -> successors adjacency map.

    Args:
        edges: Objects exposing ``predecessor_id``, ``successor_id`` and
            optionally ``deleted_at``. Soft-deleted edges are skipped.
        task_ids: Extra tasks to register as nodes even without edges

    Returns:
        Adjacency map containing every referenced task as a key
    """
    graph: Graph = {task_id: [] for task_id in task_ids}

    for edge in edges:
        if getattr(edge, "deleted_at", None) is not None:
            continue

        graph.setdefault(edge.predecessor_id, []).append(edge.successor_id)
        graph.setdefault(edge.successor_id, [])

    return graph


def find_cycle(graph: Graph, start: Optional[int] = None) -> Optional[List[int]]:
    """Find a cycle with a depth-first search.

    Args:
        graph: Adjacency map
        start: Node to search from; every node is used as a root when None

    Returns:
        Cycle as ``[c0, c1, ..., c0]`` where each consecutive pair is an edge,
        or None if no cycle is reachable.
    """
    explored: Set[int] = set()
    parent: Dict[int, Optional[int]] = {}
    roots = [start] if start is not None else list(graph)

    for root in roots:
        if root in explored:
            continue

        parent[root] = None
        on_stack: Set[int] = {root}
        stack = [(root, iter(graph.get(root, ())))]

        while stack:
            node, neighbors = stack[-1]
            descended = False

            for neighbor in neighbors:
                if neighbor in on_stack:
                    return _reconstruct_cycle(parent, node, neighbor)
                if neighbor not in explored:
                    parent[neighbor] = node
                    on_stack.add(neighbor)
                    stack.append((neighbor, iter(graph.get(neighbor, ()))))
                    descended = True
                    break

            if not descended:
                stack.pop()
                on_stack.discard(node)
                explored.add(node)

    return None


def _reconstruct_cycle(
    parent: Dict[int, Optional[int]], node: int, repeated: int
) -> List[int]:
    """Walk parent pointers from ``node`` back to ``repeated``."""
    path = [node]
    current = node
    while current != repeated:
        current = parent[current]
        path.append(current)

    path.reverse()
    path.append(repeated)
    return path


def collect_descendants(graph: Graph, start: int) -> Set[int]:
    """Return every node reachable from ``start`` (excluding ``start``)."""
    seen: Set[int] = set()
    stack = list(graph.get(start, ()))

    while stack:
        node = stack.pop()
        if node in seen or node == start:
            continue
        seen.add(node)
        stack.extend(graph.get(node, ()))

    return seen


def validate_new_edge(
    predecessor_id: int, successor_id: int, existing_edges: Iterable[Any]
) -> ValidationResult:
    """Check whether ``predecessor_id -> successor_id`` keeps the graph acyclic.

    The caller must supply every live edge reachable downstream of the
    successor; a cycle through the candidate edge can only run through those.
    Nothing is persisted here.

    Args:
        predecessor_id: Task that must resolve first
        successor_id: Task that would be blocked
        existing_edges: Live edges to validate against

    Returns:
        ValidationResult with the offending cycle on failure
    """
    if predecessor_id == successor_id:
        return ValidationResult(valid=False, error=SELF_DEPENDENCY_ERROR)

    graph = build_dependency_graph(
        existing_edges, task_ids=(successor_id, predecessor_id)
    )
    graph[predecessor_id].append(successor_id)

    circular_path = find_cycle(graph, start=successor_id)
    if circular_path:
        return ValidationResult(
            valid=False,
            error=CIRCULAR_DEPENDENCY_ERROR,
            circular_path=circular_path,
        )

    return ValidationResult(valid=True)
