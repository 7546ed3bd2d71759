"""Compilation pipeline from robot description to node-creation sequence.

Parse -> find root -> build tree -> prune -> associate collisions -> emit.
Each stage owns its input and hands its output to the next; any error aborts
the whole compilation.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field

from urdf_articulator.core.collision import CollisionLookup, associate_collisions
from urdf_articulator.core.config import CompilerConfig
from urdf_articulator.core.description import Material, RobotDescription
from urdf_articulator.core.errors import DescriptionError, MissingAsset
from urdf_articulator.core.joints import Drive, DriveAxis, Joint, LinearLocks
from urdf_articulator.core.pruning import prune_tree
from urdf_articulator.core.tree import KinematicNode, Tree, build_tree, find_root

Vector3 = Tuple[float, float, float]


class DriveSpec(BaseModel):
    """Actuator settings of one drive axis."""
    axis: str
    stiffness: float
    damping: float
    force_limit: float
    lower_limit: Optional[float] = None
    upper_limit: Optional[float] = None

    @classmethod
    def from_drive(cls, drive: Drive) -> 'DriveSpec':
        return cls(
            axis=drive.axis.value,
            stiffness=drive.stiffness,
            damping=drive.damping,
            force_limit=drive.force_limit,
            lower_limit=drive.lower_limit,
            upper_limit=drive.upper_limit,
        )


class JointSpec(BaseModel):
    """Inbound joint of a node."""
    name: str
    type: str
    articulation: str
    drives: List[DriveSpec] = Field(default_factory=list)
    has_limits: bool = False
    lower_limit: float = 0.0
    upper_limit: float = 0.0
    velocity_limit: float = 0.0
    linear_locks: Optional[Dict[str, str]] = None
    axis_sign: int = 0
    anchor_position: Vector3 = (0.0, 0.0, 0.0)

    @classmethod
    def from_joint(cls, joint: Joint) -> 'JointSpec':
        locks: Optional[LinearLocks] = joint.linear_locks
        return cls(
            name=joint.name,
            type=joint.type.value,
            articulation=joint.articulation_kind.value,
            drives=[DriveSpec.from_drive(d) for d in joint.drives],
            has_limits=joint.has_limits,
            lower_limit=joint.lower_limit,
            upper_limit=joint.upper_limit,
            velocity_limit=joint.velocity_limit,
            linear_locks={axis.value: locks.for_axis(axis).value for axis in DriveAxis} if locks else None,
            axis_sign=joint.axis_sign,
            anchor_position=joint.anchor_position,
        )


class VisualSpec(BaseModel):
    """Visual mesh of a node."""
    asset: str
    position: Vector3
    rotation: Vector3
    material: str


class CollisionSpec(BaseModel):
    """Collision mesh of a node, placed like its visual mesh."""
    asset: str
    source: str
    position: Vector3
    rotation: Vector3


class NodeSpec(BaseModel):
    """One entry of the node-creation sequence."""
    name: str
    link: str
    parent: Optional[str] = None
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)
    mass: float = 0.0
    center_of_mass: Vector3 = (0.0, 0.0, 0.0)
    immovable: bool = False
    is_sensor_only: bool = False
    joint: Optional[JointSpec] = None
    visual: Optional[VisualSpec] = None
    collision: Optional[CollisionSpec] = None


class MaterialSpec(BaseModel):
    """Material referenced by visual meshes."""
    rgba: Tuple[float, float, float, float]
    metallic: float
    glossiness: float

    @classmethod
    def from_material(cls, material: Material) -> 'MaterialSpec':
        return cls(rgba=material.rgba, metallic=material.metallic, glossiness=material.glossiness)


class CompiledRobot(BaseModel):
    """Fully resolved robot: nodes in creation order plus their materials."""
    robot_name: str
    nodes: List[NodeSpec] = Field(default_factory=list)
    materials: Dict[str, MaterialSpec] = Field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json')

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def to_yaml(self, file_path: Path) -> None:
        """Save the compiled robot to a YAML file.

        Args:
            file_path: Path to save YAML file
        """
        with open(file_path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def get_node(self, name: str) -> Optional[NodeSpec]:
        return next((n for n in self.nodes if n.name == name), None)


@dataclass
class CompilationResult:
    """Outcome of a compilation: a robot, or the error that aborted it."""
    success: bool
    robot: Optional[CompiledRobot] = None
    tree: Optional[Tree] = None
    error: Optional[DescriptionError] = None

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error else None


class ArticulationCompiler:
    """Compiles robot descriptions into engine-agnostic node sequences."""

    def __init__(
        self,
        config: Optional[CompilerConfig] = None,
        collision_lookup: Optional[CollisionLookup] = None,
        mesh_lookup: Optional[CollisionLookup] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the compiler.

        Args:
            config: Compilation options, defaults when omitted
            collision_lookup: Resolves collision identifiers to assets
            mesh_lookup: Resolves visual mesh paths to assets. When given, a
                visual mesh it cannot resolve is a MissingAsset error.
            logger: Logger for progress messages
        """
        self.config = config or CompilerConfig()
        self.collision_lookup = collision_lookup
        self.mesh_lookup = mesh_lookup
        self.logger = logger or logging.getLogger(__name__)

    def build(self, description: RobotDescription) -> Tree:
        """Run the tree stages on an already parsed description.

        Args:
            description: Parsed robot description

        Returns:
            The final tree, pruned and with collisions attached
        """
        root_name = find_root(description.links, description.joints)
        self.logger.info(f"Root link: {root_name}")

        tree = build_tree(description.links, description.joints, root_name, description.robot_name)

        if self.config.prune:
            tree = prune_tree(
                tree,
                mass_threshold=self.config.prune_mass_threshold,
                require_no_mesh=self.config.prune_require_no_mesh,
            )

        return associate_collisions(
            tree,
            source=self.config.collision_source,
            lookup=self.collision_lookup,
            required=self.config.require_collision,
        )

    def compile(self, content: str) -> CompiledRobot:
        """Compile description text.

        Args:
            content: Description XML content as string

        Returns:
            The compiled robot

        Raises:
            DescriptionError: If the description cannot be compiled
        """
        description = RobotDescription.from_string(content, self.config.up_axis)
        tree = self.build(description)
        return self.emit(tree, description.materials)

    def compile_file(self, file_path: Union[Path, str]) -> CompiledRobot:
        """Compile a description file.

        Raises:
            FileNotFoundError: If file does not exist
            DescriptionError: If the description cannot be compiled
        """
        self.logger.info(f"Compiling description: {file_path}")
        description = RobotDescription.from_file(file_path, self.config.up_axis)
        tree = self.build(description)
        return self.emit(tree, description.materials)

    def emit(self, tree: Tree, materials: Dict[str, Material]) -> CompiledRobot:
        """Flatten a tree into its node-creation sequence.

        Args:
            tree: Final kinematic tree
            materials: Materials keyed by name

        Returns:
            The compiled robot
        """
        root_label = tree.robot_name if self.config.rename_root else tree.root.name
        used_materials = set()
        nodes = []

        for node in tree.walk():
            spec = self._node_spec(node, tree.root.name, root_label)
            if spec.visual is not None:
                used_materials.add(spec.visual.material)
            nodes.append(spec)

        self.logger.info(f"Emitted {len(nodes)} nodes for robot {tree.robot_name}")
        return CompiledRobot(
            robot_name=tree.robot_name,
            nodes=nodes,
            materials={
                name: MaterialSpec.from_material(material)
                for name, material in materials.items()
                if name in used_materials
            },
        )

    def _node_spec(self, node: KinematicNode, root_name: str, root_label: str) -> NodeSpec:
        link = node.link
        spec = NodeSpec(
            name=root_label if node.is_root else node.name,
            link=node.name,
            mass=link.mass,
            center_of_mass=link.inertial_pose.position,
            is_sensor_only=link.is_sensor_only,
            immovable=node.is_root and self.config.immovable_root,
        )

        if node.joint is not None:
            parent = node.joint.parent
            spec.parent = root_label if parent == root_name else parent
            spec.position = node.joint.origin.position
            spec.rotation = node.joint.origin.rotation
            spec.joint = JointSpec.from_joint(node.joint)

        if link.has_mesh:
            asset = link.asset_path
            if self.mesh_lookup is not None:
                resolved = self.mesh_lookup(asset)
                if resolved is None:
                    raise MissingAsset(f"No mesh asset '{asset}' for: {link.name}", link.name)
                asset = resolved
            spec.visual = VisualSpec(
                asset=asset,
                position=link.mesh_pose.position,
                rotation=link.mesh_pose.rotation,
                material=link.material_name,
            )

        if node.collision is not None:
            spec.collision = CollisionSpec(
                asset=node.collision.asset,
                source=node.collision.source,
                position=link.mesh_pose.position,
                rotation=link.mesh_pose.rotation,
            )

        return spec

    def compile_safe(self, content: str) -> CompilationResult:
        """Compile description text, returning errors as a tagged result."""
        try:
            description = RobotDescription.from_string(content, self.config.up_axis)
            tree = self.build(description)
            robot = self.emit(tree, description.materials)
        except DescriptionError as e:
            self.logger.error(f"Compilation failed ({e.kind}): {e}")
            return CompilationResult(success=False, error=e)
        return CompilationResult(success=True, robot=robot, tree=tree)


def compile_description(
    content: str,
    config: Optional[CompilerConfig] = None,
    collision_lookup: Optional[CollisionLookup] = None,
) -> CompilationResult:
    """Compile description text with a one-off compiler.

    Args:
        content: Description XML content as string
        config: Compilation options
        collision_lookup: Resolves collision identifiers to assets

    Returns:
        CompilationResult holding either the robot or the error
    """
    return ArticulationCompiler(config, collision_lookup).compile_safe(content)
