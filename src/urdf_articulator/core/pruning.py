"""Removal of structurally insignificant nodes.

A node is redundant when it is rigidly attached (fixed joint), practically
massless and carries no geometry. Such nodes are usually frames or markers
that only clutter the articulation. The threshold is a heuristic, so it is
configurable.
"""

import logging
from collections import deque
from typing import Deque, List, Tuple

from urdf_articulator.core.joints import JointType
from urdf_articulator.core.tree import KinematicNode, Tree

logger = logging.getLogger(__name__)

DEFAULT_MASS_THRESHOLD = 0.01


def is_redundant(
    node: KinematicNode,
    mass_threshold: float = DEFAULT_MASS_THRESHOLD,
    require_no_mesh: bool = True,
) -> bool:
    """Return True if ``node`` may be removed from the tree.

    Args:
        node: Node to test
        mass_threshold: Nodes at or above this mass are kept
        require_no_mesh: Keep nodes whose subtree carries a mesh

    Returns:
        Whether the node is redundant
    """
    if node.joint is None:
        return False
    if node.joint.type != JointType.FIXED:
        return False
    if node.link.mass >= mass_threshold:
        return False
    if require_no_mesh and node.subtree_has_mesh():
        return False
    return True


def _copy_node(node: KinematicNode) -> KinematicNode:
    return KinematicNode(link=node.link, joint=node.joint, collision=node.collision)


def prune_tree(
    tree: Tree,
    mass_threshold: float = DEFAULT_MASS_THRESHOLD,
    require_no_mesh: bool = True,
) -> Tree:
    """Return a copy of ``tree`` without its redundant nodes.

    The root is never removed. The input tree is left untouched and pruning
    an already pruned tree with the same parameters removes nothing.

    Args:
        tree: Tree to prune
        mass_threshold: Nodes at or above this mass are kept
        require_no_mesh: Keep nodes whose subtree carries a mesh

    Returns:
        The pruned tree
    """
    removed: List[str] = []
    root = _copy_node(tree.root)
    queue: Deque[Tuple[KinematicNode, KinematicNode]] = deque([(tree.root, root)])

    while queue:
        source, copy = queue.popleft()
        for child in source.children:
            if is_redundant(child, mass_threshold, require_no_mesh):
                removed.append(child.name)
                if child.children:
                    logger.warning(
                        f"Pruning {child.name} also discards its subtree: "
                        f"{', '.join(c.name for c in child.children)}"
                    )
                continue
            child_copy = _copy_node(child)
            copy.children.append(child_copy)
            queue.append((child, child_copy))

    pruned = Tree(root, tree.robot_name)

    for name in removed:
        logger.debug(f"Pruned redundant node {name}")
    logger.info(f"Pruned {len(tree) - len(pruned)} of {len(tree)} nodes (mass < {mass_threshold})")
    return pruned
