"""Association of collision geometry with visual meshes.

Collision assets are not named in the description. They are found next to
the visual mesh by a naming convention that depends on how the colliders were
produced, and looked up through a caller supplied function.
"""

import logging
from enum import Enum
from pathlib import PurePosixPath
from typing import Callable, Optional

from urdf_articulator.core.errors import MissingAsset
from urdf_articulator.core.tree import CollisionGeometry, Tree

logger = logging.getLogger(__name__)

CollisionLookup = Callable[[str], Optional[str]]

COLLISION_SUFFIX = ".obj"
HULL_SUFFIX = "_hull"


class CollisionSource(str, Enum):
    """Where collision meshes come from."""
    ENGINE_NATIVE = "engine-native"
    EXTERNAL_DECOMPOSITION = "external-decomposition"


def derive_collision_id(asset_path: str, source: CollisionSource = CollisionSource.ENGINE_NATIVE) -> str:
    """Derive the collision asset identifier for a visual mesh.

    Args:
        asset_path: Visual mesh path, without the ``package://`` scheme
        source: Collision naming convention

    Returns:
        The expected collision asset identifier

    Examples:
        >>> derive_collision_id("meshes/arm.dae")
        'meshes/arm.obj'
        >>> derive_collision_id("meshes/arm.dae", CollisionSource.EXTERNAL_DECOMPOSITION)
        'meshes/arm_hull.obj'
    """
    path = PurePosixPath(asset_path)
    if CollisionSource(source) == CollisionSource.EXTERNAL_DECOMPOSITION:
        return str(path.with_name(path.stem + HULL_SUFFIX + COLLISION_SUFFIX))
    return str(path.with_suffix(COLLISION_SUFFIX))


def associate_collisions(
    tree: Tree,
    source: CollisionSource = CollisionSource.ENGINE_NATIVE,
    lookup: Optional[CollisionLookup] = None,
    required: bool = False,
) -> Tree:
    """Attach collision geometry to every node with a visual mesh.

    The tree is updated in place and returned. A missing collision asset is
    not an error unless ``required`` is set.

    Args:
        tree: Tree to update
        source: Collision naming convention
        lookup: Maps a collision identifier to an asset reference, or None
            when absent. Without it the identifier itself is used.
        required: Raise instead of skipping nodes without collision asset

    Returns:
        The same tree

    Raises:
        MissingAsset: If ``required`` is set and a lookup fails
    """
    source = CollisionSource(source)
    attached = 0

    for node in tree.walk():
        if not node.link.has_mesh:
            continue

        collision_id = derive_collision_id(node.link.asset_path, source)
        asset = lookup(collision_id) if lookup is not None else collision_id

        if asset is None:
            if required:
                raise MissingAsset(f"No collision asset '{collision_id}' for: {node.name}", node.name)
            logger.warning(f"No collision asset '{collision_id}' for {node.name}, link has no colliders")
            continue

        node.collision = CollisionGeometry(asset=asset, source=source.value)
        attached += 1
        logger.debug(f"Attached collision {asset} to {node.name}")

    logger.info(f"Attached collision geometry to {attached} nodes ({source.value})")
    return tree
