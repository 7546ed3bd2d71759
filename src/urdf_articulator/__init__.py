"""URDF Articulator - compile robot descriptions into articulation trees.

This package parses robot description documents, builds the kinematic tree,
resolves joint drives in the target engine's coordinate convention, prunes
redundant nodes and attaches collision geometry.
"""

from urdf_articulator.core.collision import CollisionSource, derive_collision_id
from urdf_articulator.core.compiler import (
    ArticulationCompiler,
    CompilationResult,
    CompiledRobot,
    NodeSpec,
    compile_description,
)
from urdf_articulator.core.config import CompilerConfig
from urdf_articulator.core.coordinates import Pose, UpAxis
from urdf_articulator.core.description import Link, Material, RobotDescription
from urdf_articulator.core.errors import (
    AmbiguousRoot,
    DescriptionError,
    MalformedDescription,
    MissingAsset,
    MissingAxis,
    UnsupportedJointType,
)
from urdf_articulator.core.joints import DriveAxis, Joint, JointType
from urdf_articulator.core.pruning import prune_tree
from urdf_articulator.core.tree import KinematicNode, Tree, build_tree, find_root

__version__ = "1.0.0"
__author__ = "URDF Articulator Team"

# Public API exports
__all__ = [
    # Metadata
    "__version__",
    "__author__",
    # Compilation
    "ArticulationCompiler",
    "CompilerConfig",
    "CompilationResult",
    "CompiledRobot",
    "NodeSpec",
    "compile_description",
    # Description records
    "RobotDescription",
    "Link",
    "Joint",
    "JointType",
    "DriveAxis",
    "Material",
    "Pose",
    "UpAxis",
    # Tree
    "KinematicNode",
    "Tree",
    "find_root",
    "build_tree",
    "prune_tree",
    "CollisionSource",
    "derive_collision_id",
    # Errors
    "DescriptionError",
    "MalformedDescription",
    "UnsupportedJointType",
    "AmbiguousRoot",
    "MissingAxis",
    "MissingAsset",
]
