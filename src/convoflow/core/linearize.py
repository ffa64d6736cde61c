"""
Order Linearizer.

Derives one deterministic playback sequence from a flow graph that may branch,
re-converge and even loop. The function is pure: it only reads the node and
edge sequences it is given, and the same input always yields the same output.

Algorithm:
1. Start set: nodes without an incoming edge, in node list order. A graph with
   no such node (a closed cycle) starts from the first node in the list.
2. Convergence: for every node with more than one distinct source, the source
   with the smallest y is the primary predecessor; the other sources are
   excluded from the default traversal.
3. Depth-first preorder walk from each start node, following outgoing edges in
   edge order, skipping visited and excluded nodes.
4. Appendix: nodes neither visited nor excluded follow in node list order.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Mapping, Sequence, Set

from .types import Edge, LinearOrder, Node

logger = logging.getLogger(__name__)


def _index_edges(
    nodes: Mapping[str, Node], edges: Sequence[Edge]
) -> tuple[Dict[str, List[Edge]], Dict[str, List[Edge]]]:
    outgoing: Dict[str, List[Edge]] = defaultdict(list)
    incoming: Dict[str, List[Edge]] = defaultdict(list)
    for edge in edges:
        if edge.source_id not in nodes or edge.target_id not in nodes:
            continue
        outgoing[edge.source_id].append(edge)
        incoming[edge.target_id].append(edge)
    return outgoing, incoming


def find_start_nodes(nodes: Sequence[Node], incoming: Mapping[str, List[Edge]]) -> List[Node]:
    starts = [n for n in nodes if not incoming.get(n.id)]
    if not starts and nodes:
        # Closed cycle: no entry point exists, fall back to the first node.
        logger.debug(f"No start node found, falling back to {nodes[0].id}")
        starts = [nodes[0]]
    return starts


def resolve_convergence(
    nodes: Mapping[str, Node], incoming: Mapping[str, List[Edge]]
) -> Set[str]:
    """
    Return the ids of alternate-branch sources at every convergence point.

    The topmost source (smallest y) is kept; ties go to the source whose edge
    was created first.
    """
    excluded: Set[str] = set()
    for target_id, edges in incoming.items():
        sources: List[str] = []
        for edge in edges:
            if edge.source_id not in sources:
                sources.append(edge.source_id)
        if len(sources) < 2:
            continue

        primary = min(sources, key=lambda sid: nodes[sid].position.y)
        excluded.update(sid for sid in sources if sid != primary)
    return excluded


def depth_first_order(
    starts: Sequence[Node],
    outgoing: Mapping[str, List[Edge]],
    excluded: Set[str],
    visited: Set[str],
) -> List[str]:
    """
    Preorder walk with an explicit stack.

    Children are pushed in reverse so they pop in edge order, which keeps the
    result identical to a recursive walk. `visited` is updated in place.
    """
    order: List[str] = []
    for start in starts:
        stack = [start.id]
        while stack:
            node_id = stack.pop()
            if node_id in visited or node_id in excluded:
                continue
            visited.add(node_id)
            order.append(node_id)
            children = [
                e.target_id for e in outgoing.get(node_id, [])
                if e.target_id not in excluded and e.target_id not in visited
            ]
            stack.extend(reversed(children))
    return order


def compute_linear_order(nodes: Sequence[Node], edges: Sequence[Edge]) -> LinearOrder:
    """
    Linearize a graph snapshot into playback order.

    Returns legacy ids. Edges whose endpoints are not among `nodes` are ignored.
    """
    if not nodes:
        return LinearOrder()

    by_id = {n.id: n for n in nodes}
    outgoing, incoming = _index_edges(by_id, edges)

    starts = find_start_nodes(nodes, incoming)
    excluded = resolve_convergence(by_id, incoming)

    visited: Set[str] = set()
    walked = depth_first_order(starts, outgoing, excluded, visited)
    appendix = [n.id for n in nodes if n.id not in visited and n.id not in excluded]

    orphans = [n.id for n in nodes if not incoming.get(n.id) and not outgoing.get(n.id)]

    return LinearOrder(
        order=[by_id[nid].legacy_id for nid in walked + appendix],
        orphan_ids=[by_id[nid].legacy_id for nid in orphans],
        excluded_ids=[n.legacy_id for n in nodes if n.id in excluded],
    )
