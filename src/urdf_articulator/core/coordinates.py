"""Coordinate conversion between robot descriptions and the target engine.

Robot descriptions are right-handed with Z up and X forward, angles in
radians. The target engine is left-handed, with either Y up (default) or
Z up, angles in degrees. Conversions are expressed as a signed permutation
matrix applied to positions; orientations transform as pseudo-vectors,
so they pick up the determinant of that matrix.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from urdf_articulator.core.errors import MalformedDescription

Vector3 = Tuple[float, float, float]


class UpAxis(str, Enum):
    """Up axis of the target engine."""
    Y = "y"
    Z = "z"


_BASES: Dict[UpAxis, np.ndarray] = {
    # (x, y, z) -> (-y, z, x)
    UpAxis.Y: np.array(
        [
            [0.0, -1.0, 0.0],
            [0.0, 0.0, 1.0],
            [1.0, 0.0, 0.0],
        ]
    ),
    # (x, y, z) -> (x, -y, z)
    UpAxis.Z: np.array(
        [
            [1.0, 0.0, 0.0],
            [0.0, -1.0, 0.0],
            [0.0, 0.0, 1.0],
        ]
    ),
}

# Meshes exported for Y-up engines come in rotated; this undoes the import.
_VISUAL_OFFSETS: Dict[UpAxis, Optional[np.ndarray]] = {
    UpAxis.Y: np.array([-90.0, 0.0, 90.0]),
    UpAxis.Z: None,
}


@dataclass(frozen=True)
class Pose:
    """Position and Euler angles (degrees) in engine space."""

    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)


IDENTITY = Pose()


def parse_vector(text: Optional[str], subject: Optional[str] = None, size: int = 3) -> Tuple[float, ...]:
    """Parse a whitespace separated list of floats.

    Args:
        text: Attribute value such as ``"0.1 0 0.2"``
        subject: Name of the link or joint the value belongs to
        size: Expected number of components

    Returns:
        Tuple of floats

    Raises:
        MalformedDescription: If the value is absent, not numeric or has
            the wrong number of components
    """
    if text is None:
        raise MalformedDescription(f"Missing vector value for: {subject}", subject)
    try:
        values = tuple(float(q) for q in text.split())
    except ValueError:
        raise MalformedDescription(f"Invalid numeric vector '{text}' for: {subject}", subject)
    if len(values) != size:
        raise MalformedDescription(
            f"Expected {size} components, got {len(values)} in '{text}' for: {subject}",
            subject,
        )
    return values


def _basis(up_axis: UpAxis) -> np.ndarray:
    return _BASES[UpAxis(up_axis)]


def convert_position(xyz: Sequence[float], up_axis: UpAxis = UpAxis.Y) -> Vector3:
    """Convert a description-space position to engine space.

    Args:
        xyz: Position in the description frame
        up_axis: Up axis of the target engine

    Returns:
        Position in the engine frame
    """
    converted = _basis(up_axis) @ np.asarray(xyz, dtype=float)
    return tuple(float(c) for c in converted)


def convert_rotation(rpy: Sequence[float], up_axis: UpAxis = UpAxis.Y) -> Vector3:
    """Convert roll-pitch-yaw radians to engine Euler angles in degrees.

    Args:
        rpy: Roll, pitch and yaw in radians
        up_axis: Up axis of the target engine

    Returns:
        Euler angles in degrees, permuted and signed to match
        :func:`convert_position`
    """
    basis = _basis(up_axis)
    # Rotations are pseudo-vectors: a handedness flip negates them.
    handedness = np.sign(np.linalg.det(basis))
    converted = handedness * (basis @ np.degrees(np.asarray(rpy, dtype=float)))
    return tuple(float(c) for c in converted)


def convert_pose(xyz: Sequence[float], rpy: Sequence[float], up_axis: UpAxis = UpAxis.Y) -> Pose:
    """Convert a description-space pose to an engine-space :class:`Pose`."""
    return Pose(position=convert_position(xyz, up_axis), rotation=convert_rotation(rpy, up_axis))


def visual_rotation(rotation: Sequence[float], up_axis: UpAxis = UpAxis.Y) -> Vector3:
    """Return the local rotation of a visual mesh given its converted rotation."""
    offset = _VISUAL_OFFSETS[UpAxis(up_axis)]
    if offset is None:
        return tuple(float(c) for c in rotation)
    return tuple(float(c) for c in offset - np.asarray(rotation, dtype=float))
