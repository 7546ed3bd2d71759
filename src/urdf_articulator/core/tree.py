"""Kinematic tree construction.

The root is the one link no joint claims as child. The tree is then built
breadth-first from the root, so nodes are created parent-first in the order
a consumer must instantiate them.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterator, List, Mapping, Optional

from urdf_articulator.core.description import Link
from urdf_articulator.core.errors import AmbiguousRoot, MalformedDescription
from urdf_articulator.core.joints import Joint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollisionGeometry:
    """Collision asset attached next to a node's visual mesh."""

    asset: str
    source: str


@dataclass
class KinematicNode:
    """One link of the tree with its inbound joint and children."""

    link: Link
    joint: Optional[Joint] = None
    children: List["KinematicNode"] = field(default_factory=list)
    collision: Optional[CollisionGeometry] = None

    @property
    def name(self) -> str:
        return self.link.name

    @property
    def parent_name(self) -> Optional[str]:
        return self.joint.parent if self.joint else None

    @property
    def is_root(self) -> bool:
        return self.joint is None

    def subtree_has_mesh(self) -> bool:
        """Return True if this node or any descendant carries a mesh."""
        return any(node.link.has_mesh for node in _iter_bfs(self))


def _iter_bfs(start: KinematicNode) -> Iterator[KinematicNode]:
    queue: Deque[KinematicNode] = deque([start])
    while queue:
        node = queue.popleft()
        yield node
        queue.extend(node.children)


class Tree:
    """Root node plus a name-indexed registry of every reachable node."""

    def __init__(self, root: KinematicNode, robot_name: str = "robot"):
        """Initialize the tree and index its nodes.

        Args:
            root: Root node (no inbound joint)
            robot_name: Name of the robot the tree describes
        """
        self.root = root
        self.robot_name = robot_name
        self.nodes: Dict[str, KinematicNode] = {node.name: node for node in _iter_bfs(root)}

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, name: object) -> bool:
        return name in self.nodes

    def walk(self) -> Iterator[KinematicNode]:
        """Yield nodes in breadth-first creation order."""
        return _iter_bfs(self.root)

    def find(self, name: str) -> Optional[KinematicNode]:
        """Get a node by link name.

        Args:
            name: Name of the link

        Returns:
            The node if present, None otherwise
        """
        return self.nodes.get(name)

    def depth_of(self, name: str) -> int:
        """Return the number of joints between the root and ``name``.

        Raises:
            KeyError: If no node has that name
        """
        node = self.nodes[name]
        depth = 0
        while node.joint is not None:
            node = self.nodes[node.joint.parent]
            depth += 1
        return depth


def find_root(links: Mapping[str, Link], joints: Mapping[str, Joint]) -> str:
    """Find the single link no joint claims as child.

    Args:
        links: Links keyed by name
        joints: Joints keyed by child link name

    Returns:
        Name of the root link

    Raises:
        AmbiguousRoot: If zero or several links are unclaimed
    """
    candidates = [name for name in links if name not in joints]

    if not candidates:
        raise AmbiguousRoot("No root link found: every link is a joint child (cyclic joint graph)")
    if len(candidates) > 1:
        raise AmbiguousRoot(
            f"Multiple root links found: {', '.join(candidates)}. Expected a single root.",
            candidates[0],
        )
    return candidates[0]


def build_tree(
    links: Mapping[str, Link],
    joints: Mapping[str, Joint],
    root_name: str,
    robot_name: str = "robot",
) -> Tree:
    """Build the kinematic tree breadth-first from the root.

    Args:
        links: Links keyed by name
        joints: Joints keyed by child link name
        root_name: Name of the root link
        robot_name: Name of the robot

    Returns:
        The kinematic tree

    Raises:
        MalformedDescription: If the root has an inbound joint, a joint
            references an unknown link, or some links are unreachable from
            the root. Joints are keyed by child, so every link is reached at
            most once and cycles show up as unreachable links.
    """
    if root_name not in links:
        raise MalformedDescription(f"Root link does not exist: {root_name}", root_name)
    if root_name in joints:
        raise MalformedDescription(
            f"Root link {root_name} is the child of joint {joints[root_name].name}",
            root_name,
        )

    for child, joint in joints.items():
        if child not in links:
            raise MalformedDescription(f"Joint {joint.name} references unknown child link: {child}", joint.name)
        if joint.parent not in links:
            raise MalformedDescription(
                f"Joint {joint.name} references unknown parent link: {joint.parent}",
                joint.name,
            )

    # Siblings are created in link declaration order.
    children_of: Dict[str, List[str]] = {}
    for name in links:
        if name in joints:
            children_of.setdefault(joints[name].parent, []).append(name)

    root = KinematicNode(link=links[root_name])
    created: Dict[str, KinematicNode] = {root_name: root}
    queue: Deque[str] = deque([root_name])

    while queue:
        name = queue.popleft()
        parent = created[name]
        for child in children_of.get(name, []):
            node = KinematicNode(link=links[child], joint=joints[child])
            parent.children.append(node)
            created[child] = node
            queue.append(child)
            logger.debug(f"Created node {child} under {name}")

    unreachable = [name for name in links if name not in created]
    if unreachable:
        raise MalformedDescription(
            f"Links not reachable from root {root_name} (cyclic joints): {', '.join(unreachable)}",
            unreachable[0],
        )

    logger.info(f"Built kinematic tree rooted at {root_name} with {len(created)} nodes")
    return Tree(root, robot_name)
