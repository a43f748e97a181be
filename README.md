# gsfm

Building blocks for a global structure-from-motion pipeline, built on NumPy
and SciPy. The package holds the scene model (cameras, images, image pairs,
tracks and the view graph) and the processors that score, filter and cluster
it.

## Modules

- `gsfm.types`: the `Rigid3d` transform (`identity`, `inverse`, `compose`,
  `transform`, `copy`), `InlierThresholdOptions`, the `TwoViewConfig`
  enumeration of two-view geometry kinds, and constants such as `EPS` and
  `MAX_NUM_IMAGES`.
- `gsfm.rigid3d`: rotation angle (`calc_angle`, `calc_rotation_angle`),
  center distance (`calc_trans`) and translation direction angle
  (`calc_trans_angle`) between poses; degree/radian conversion; conversions
  between angle-axis vectors and rotation matrices.
- `gsfm.gravity`: `get_align_rot` builds a rotation whose second column is the
  gravity direction; `rot_up_to_angle` and `angle_to_rot_up` convert between
  rotations about the y axis and their angle.
- `gsfm.union_find`: `UnionFind`, a disjoint-set structure with path
  compression.
- `gsfm.l1_solver`: `L1Solver` minimizes `||A x - b||_1` with ADMM, using a
  sparse LU factorization of `A.T @ A`; tuned by `L1SolverOptions`.
- `gsfm.camera`: `Camera` with the models `SIMPLE_PINHOLE`, `PINHOLE`,
  `SIMPLE_RADIAL`, `RADIAL` and `OPENCV` (`CameraModel`); focal length,
  principal point, calibration matrix, projection (`img_from_cam`) and
  iterative undistortion (`cam_from_img`).
- `gsfm.two_view_geometry`: essential and fundamental matrices from a
  relative pose, Sampson error for 2D points or 3D rays, homography transfer
  error, cheirality and orientation checks.
- `gsfm.image`, `gsfm.image_pair`, `gsfm.track`: `Image` (with `GravityInfo`),
  `ImagePair` with its matches and inliers, `Track`; order-independent pair
  ids via `image_pair_to_pair_id` and `pair_id_to_image_pair`.
- `gsfm.view_graph`: `ViewGraph`, with `keep_largest_connected_components`
  and `mark_connected_components`.
- `gsfm.tree`: `bfs` over an adjacency list and `maximum_spanning_tree` over
  the registered images of a view graph, weighted by inlier count or pair
  weight (`WeightType`).
- `gsfm.gravity_io`: `read_gravity` loads lines of `name gx gy gz` and aligns
  the initial image rotations with them.
- `gsfm.image_pair_inliers`: `ImagePairInliers` and `image_pairs_inlier_count`
  classify matches as inliers of the pair's essential, fundamental or
  homography geometry.
- `gsfm.image_undistorter`: `undistort_images` fills each image's unit
  feature rays.
- `gsfm.relpose_filter`: invalidate pairs by rotation disagreement, inlier
  count or inlier ratio.
- `gsfm.track_filter`: drop observations by reprojection error or angle, and
  clear tracks with too small a triangulation angle.
- `gsfm.view_graph_manipulation`: `sparsify_graph`,
  `establish_strong_clusters` (`StrongClusterCriteria`) and
  `update_image_pairs_config`.
- `gsfm.reconstruction_pruning`: `prune_weakly_connected_images` clusters
  images by the tracks they share.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from gsfm.image import Image
from gsfm.image_pair import ImagePair
from gsfm.view_graph import ViewGraph

images = {i: Image(image_id=i, camera_id=1, file_name=f"{i}.jpg") for i in range(4)}
graph = ViewGraph()
for a, b in [(0, 1), (1, 2)]:
    pair = ImagePair(a, b)
    graph.image_pairs[pair.pair_id] = pair

largest = graph.keep_largest_connected_components(images)
print(largest)                     # 3
print(images[3].is_registered)     # False
```

Gravity directions can be attached to images from a file holding one line per
image: the file name followed by three numbers, separated by single spaces.
`read_gravity` returns the number of images it updated.

```python
from gsfm.gravity_io import read_gravity

count = read_gravity("gravity.txt", images)
```

## What this package does not do

- It has no command-line program; everything is used from Python.
- It does not read feature or match databases, nor read or write
  reconstructions in any on-disk format. Cameras, images, matches and tracks
  are built in Python by the caller; the only file it reads is the gravity
  text file.
- It does not estimate or decompose relative poses from matches, and it does
  not perform rotation averaging, global positioning, triangulation or bundle
  adjustment. It works on poses and geometry that are already given.