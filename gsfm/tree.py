"""Breadth-first search and maximum spanning trees over the view graph."""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Dict, Iterable, List, Sequence, Tuple

from gsfm.image import Image
from gsfm.union_find import UnionFind
from gsfm.view_graph import ViewGraph


class WeightType(Enum):
    INLIER_NUM = 0
    INLIER_RATIO = 1


def bfs(
    graph: Sequence[Iterable[int]],
    root: int,
    banned_edges: Iterable[Tuple[int, int]] = (),
) -> Tuple[List[int], int]:
    """Traverse an adjacency list from ``root``.

    Returns the parent of every vertex (the root is its own parent, unreached
    vertices have -1) and the number of vertices reached besides the root.
    """
    banned = set()
    for a, b in banned_edges:
        banned.add((a, b))
        banned.add((b, a))

    parents = [-1] * len(graph)
    parents[root] = root
    visited = {root}
    queue = deque([root])
    reached = 0
    while queue:
        current = queue.popleft()
        for neighbor in graph[current]:
            if (current, neighbor) in banned:
                continue
            if neighbor not in visited:
                visited.add(neighbor)
                parents[neighbor] = current
                queue.append(neighbor)
                reached += 1
    return parents, reached


def maximum_spanning_tree(
    view_graph: ViewGraph,
    images: Dict[int, Image],
    weight_type: WeightType = WeightType.INLIER_NUM,
) -> Tuple[int, Dict[int, int]]:
    """Spanning tree of registered images that maximizes the pair weights.

    Returns the root image id and a map from image id to its parent image id;
    the root is its own parent. Images not connected to the root are left out.
    """
    idx_to_image_id = [image_id for image_id, image in images.items() if image.is_registered]
    if not idx_to_image_id:
        raise ValueError("no registered images to build a spanning tree from")
    image_id_to_idx = {image_id: idx for idx, image_id in enumerate(idx_to_image_id)}

    edges: List[Tuple[float, int, int]] = []
    for pair in view_graph.image_pairs.values():
        if not pair.is_valid:
            continue
        if not (images[pair.image_id1].is_registered and images[pair.image_id2].is_registered):
            continue
        if weight_type is WeightType.INLIER_RATIO:
            weight = pair.weight
        else:
            weight = float(len(pair.inliers))
        edges.append((weight, image_id_to_idx[pair.image_id1], image_id_to_idx[pair.image_id2]))

    edges.sort(key=lambda edge: edge[0], reverse=True)

    forest: UnionFind[int] = UnionFind()
    adjacency: List[List[int]] = [[] for _ in idx_to_image_id]
    for _, idx1, idx2 in edges:
        if forest.find(idx1) != forest.find(idx2):
            forest.union(idx1, idx2)
            adjacency[idx1].append(idx2)
            adjacency[idx2].append(idx1)

    parents_idx, _ = bfs(adjacency, 0)
    parents = {
        idx_to_image_id[idx]: idx_to_image_id[parent]
        for idx, parent in enumerate(parents_idx)
        if parent != -1
    }
    return idx_to_image_id[0], parents