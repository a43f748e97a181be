"""Graph of images connected by valid image pairs."""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Set

from gsfm.image import Image
from gsfm.image_pair import ImagePair


class ViewGraph:
    """Image pairs keyed by pair id, with connectivity queries."""

    def __init__(self) -> None:
        self.image_pairs: Dict[int, ImagePair] = {}
        self.num_images = 0
        self.num_pairs = 0
        self._adjacency_list: Dict[int, Set[int]] = {}
        self._connected_components: List[Set[int]] = []

    @property
    def adjacency_list(self) -> Dict[int, Set[int]]:
        return self._adjacency_list

    def remove_invalid_pair(self, pair_id: int) -> None:
        self.image_pairs[pair_id].is_valid = False

    def establish_adjacency_list(self) -> None:
        adjacency: Dict[int, Set[int]] = {}
        for pair in self.image_pairs.values():
            if pair.is_valid:
                adjacency.setdefault(pair.image_id1, set()).add(pair.image_id2)
                adjacency.setdefault(pair.image_id2, set()).add(pair.image_id1)
        self._adjacency_list = adjacency

    def _find_connected_components(self) -> int:
        visited: Set[int] = set()
        components: List[Set[int]] = []
        for image_id in self._adjacency_list:
            if image_id not in visited:
                components.append(self._bfs(image_id, visited))
        self._connected_components = components
        return len(components)

    def _bfs(self, root: int, visited: Set[int]) -> Set[int]:
        component = {root}
        visited.add(root)
        queue = deque([root])
        while queue:
            current = queue.popleft()
            for neighbor in self._adjacency_list.get(current, ()):
                if neighbor not in visited:
                    visited.add(neighbor)
                    component.add(neighbor)
                    queue.append(neighbor)
        return component

    def keep_largest_connected_components(self, images: Dict[int, Image]) -> int:
        """Register only the images of the largest component.

        Pairs touching an unregistered image become invalid. Returns the
        number of images in the largest component.
        """
        self.establish_adjacency_list()
        self._find_connected_components()

        largest: Set[int] = set()
        for component in self._connected_components:
            if len(component) > len(largest):
                largest = component

        for image in images.values():
            image.is_registered = False
        for image_id in largest:
            images[image_id].is_registered = True

        def registered(image_id: int) -> bool:
            image = images.get(image_id)
            return image is not None and image.is_registered

        self.num_pairs = 0
        for pair in self.image_pairs.values():
            if not registered(pair.image_id1) or not registered(pair.image_id2):
                pair.is_valid = False
            if pair.is_valid:
                self.num_pairs += 1

        self.num_images = len(largest)
        return len(largest)

    def mark_connected_components(
        self, images: Dict[int, Image], min_num_img: int = -1
    ) -> int:
        """Number clusters by decreasing size and store them on the images.

        Components smaller than ``min_num_img`` keep cluster id -1. Returns
        the number of clusters assigned.
        """
        self.establish_adjacency_list()
        self._find_connected_components()

        ranked = sorted(
            ((len(component), index) for index, component in enumerate(self._connected_components)),
            reverse=True,
        )

        for image in images.values():
            image.cluster_id = -1

        num_clusters = 0
        for size, index in ranked:
            if size < min_num_img:
                break
            for image_id in self._connected_components[index]:
                images[image_id].cluster_id = num_clusters
            num_clusters += 1
        return num_clusters