"""Joint classification and drive resolution.

Turns a raw joint record into a typed :class:`Joint` with its resolved drive
axes, limits and actuator parameters. The five supported joint kinds form a
closed set; each one has its own resolver in ``_RESOLVERS``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from urdf_articulator.core.coordinates import IDENTITY, Pose
from urdf_articulator.core.errors import MalformedDescription, MissingAxis, UnsupportedJointType

logger = logging.getLogger(__name__)

# Stiff position-tracking actuator applied to every drive.
DRIVE_STIFFNESS = 1000.0
DRIVE_DAMPING = 180.0
# Velocity limit for joints whose description carries none.
DEFAULT_VELOCITY_LIMIT = 2.0


class JointType(str, Enum):
    """Supported joint types of the description format."""
    FIXED = "fixed"
    CONTINUOUS = "continuous"
    REVOLUTE = "revolute"
    PRISMATIC = "prismatic"
    FLOATING = "floating"

    @classmethod
    def from_string(cls, value: Optional[str], joint_name: Optional[str] = None) -> "JointType":
        """Parse a joint type attribute.

        Args:
            value: Raw ``type`` attribute
            joint_name: Name of the joint, for error messages

        Returns:
            The joint type

        Raises:
            MalformedDescription: If the attribute is absent
            UnsupportedJointType: If the type is not one of the supported kinds
        """
        if not value:
            raise MalformedDescription(f"Joint has no type: {joint_name}", joint_name)
        try:
            return cls(value.strip().lower())
        except ValueError:
            supported = [t.value for t in cls]
            raise UnsupportedJointType(
                f"Joint type not supported: '{value}' ({joint_name}). "
                f"Must be one of: {', '.join(supported)}",
                joint_name,
            )


class ArticulationKind(str, Enum):
    """Joint kind as understood by the physics engine."""
    FIXED = "fixed"
    REVOLUTE = "revolute"
    PRISMATIC = "prismatic"
    SPHERICAL = "spherical"


ARTICULATION_KINDS: Dict[JointType, ArticulationKind] = {
    JointType.FIXED: ArticulationKind.FIXED,
    JointType.CONTINUOUS: ArticulationKind.REVOLUTE,
    JointType.REVOLUTE: ArticulationKind.REVOLUTE,
    JointType.PRISMATIC: ArticulationKind.PRISMATIC,
    JointType.FLOATING: ArticulationKind.SPHERICAL,
}


class DriveAxis(str, Enum):
    """A single degree of freedom actuated by a drive."""
    X = "x"
    Y = "y"
    Z = "z"


class DofMotion(str, Enum):
    """Motion allowed along a translational degree of freedom."""
    LIMITED = "limited"
    LOCKED = "locked"


@dataclass(frozen=True)
class LinearLocks:
    """Translational motion of a prismatic joint along each axis."""

    x: DofMotion
    y: DofMotion
    z: DofMotion

    def for_axis(self, axis: DriveAxis) -> DofMotion:
        """Return the motion configured for ``axis``."""
        return getattr(self, axis.value)


# The selected axis slides within its limits, the other two are locked.
PRISMATIC_LOCKS: Dict[DriveAxis, LinearLocks] = {
    DriveAxis.X: LinearLocks(x=DofMotion.LIMITED, y=DofMotion.LOCKED, z=DofMotion.LOCKED),
    DriveAxis.Y: LinearLocks(x=DofMotion.LOCKED, y=DofMotion.LIMITED, z=DofMotion.LOCKED),
    DriveAxis.Z: LinearLocks(x=DofMotion.LOCKED, y=DofMotion.LOCKED, z=DofMotion.LIMITED),
}


@dataclass
class RawLimit:
    """Limit record as written in the description."""

    lower: float = 0.0
    upper: float = 0.0
    velocity: Optional[float] = None


@dataclass
class JointLimits:
    """Resolved motion limits."""

    lower: float
    upper: float
    velocity: float


@dataclass
class RawJoint:
    """Joint record before classification."""

    name: str
    type: str
    parent: str
    child: str
    origin: Pose = IDENTITY
    axis: Optional[Tuple[float, float, float]] = None
    limit: Optional[RawLimit] = None


@dataclass
class Drive:
    """Actuator settings for one drive axis."""

    axis: DriveAxis
    stiffness: float = DRIVE_STIFFNESS
    damping: float = DRIVE_DAMPING
    force_limit: float = DEFAULT_VELOCITY_LIMIT
    lower_limit: Optional[float] = None
    upper_limit: Optional[float] = None


@dataclass
class Joint:
    """Classified joint connecting a parent link to a child link."""

    name: str
    type: JointType
    parent: str
    child: str
    origin: Pose = IDENTITY
    drives: List[Drive] = field(default_factory=list)
    limits: Optional[JointLimits] = None
    velocity_limit: float = 0.0
    linear_locks: Optional[LinearLocks] = None
    axis_sign: int = 0
    # Joint frames are anchored at the child node origin.
    anchor_position: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def drive_axes(self) -> List[DriveAxis]:
        return [d.axis for d in self.drives]

    @property
    def has_limits(self) -> bool:
        return self.limits is not None

    @property
    def lower_limit(self) -> float:
        return self.limits.lower if self.limits else 0.0

    @property
    def upper_limit(self) -> float:
        return self.limits.upper if self.limits else 0.0

    @property
    def articulation_kind(self) -> ArticulationKind:
        return ARTICULATION_KINDS[self.type]


def resolve_axis(axis: Optional[Sequence[float]], joint_name: str) -> Tuple[DriveAxis, int]:
    """Pick the cardinal drive axis of a single-axis joint.

    Components are scanned in x, y, z order. Exactly one of them must be
    non-zero; compound axes are not supported.

    Args:
        axis: Raw axis vector in description space
        joint_name: Name of the joint, for error messages

    Returns:
        Tuple of (drive axis, sign of the selected component)

    Raises:
        MissingAxis: If the axis is absent, zero or has several non-zero components
    """
    if axis is None:
        raise MissingAxis(f"No axis for: {joint_name}", joint_name)

    selected = [(a, c) for a, c in zip(DriveAxis, axis) if c != 0]
    if not selected:
        raise MissingAxis(f"No axis for: {joint_name}", joint_name)
    if len(selected) > 1:
        raise MissingAxis(
            f"Compound axis {tuple(axis)} is not supported for: {joint_name}",
            joint_name,
        )

    drive_axis, component = selected[0]
    return drive_axis, 1 if component > 0 else -1


def _required_limits(raw: RawJoint) -> JointLimits:
    if raw.limit is None:
        raise MalformedDescription(f"Joint has no limit: {raw.name}", raw.name)
    if raw.limit.velocity is None:
        raise MalformedDescription(f"Joint limit has no velocity: {raw.name}", raw.name)
    return JointLimits(lower=raw.limit.lower, upper=raw.limit.upper, velocity=raw.limit.velocity)


def _make_drive(axis: DriveAxis, velocity_limit: float, limits: Optional[JointLimits] = None) -> Drive:
    drive = Drive(axis=axis, force_limit=velocity_limit)
    if limits is not None:
        drive.lower_limit = limits.lower
        drive.upper_limit = limits.upper
    return drive


def _resolve_fixed(joint: Joint, raw: RawJoint) -> None:
    pass


def _resolve_continuous(joint: Joint, raw: RawJoint) -> None:
    axis, joint.axis_sign = resolve_axis(raw.axis, raw.name)
    joint.velocity_limit = DEFAULT_VELOCITY_LIMIT
    joint.drives = [_make_drive(axis, joint.velocity_limit)]


def _resolve_revolute(joint: Joint, raw: RawJoint) -> None:
    axis, joint.axis_sign = resolve_axis(raw.axis, raw.name)
    joint.limits = _required_limits(raw)
    joint.velocity_limit = joint.limits.velocity
    joint.drives = [_make_drive(axis, joint.velocity_limit, joint.limits)]


def _resolve_prismatic(joint: Joint, raw: RawJoint) -> None:
    _resolve_revolute(joint, raw)
    joint.linear_locks = PRISMATIC_LOCKS[joint.drives[0].axis]


def _resolve_floating(joint: Joint, raw: RawJoint) -> None:
    joint.velocity_limit = DEFAULT_VELOCITY_LIMIT
    joint.drives = [_make_drive(axis, joint.velocity_limit) for axis in DriveAxis]


_RESOLVERS: Dict[JointType, Callable[[Joint, RawJoint], None]] = {
    JointType.FIXED: _resolve_fixed,
    JointType.CONTINUOUS: _resolve_continuous,
    JointType.REVOLUTE: _resolve_revolute,
    JointType.PRISMATIC: _resolve_prismatic,
    JointType.FLOATING: _resolve_floating,
}


def classify_joint(raw: RawJoint) -> Joint:
    """Classify a raw joint and resolve its drives.

    Args:
        raw: Joint record as parsed from the description

    Returns:
        Typed joint with drives, limits and locks resolved

    Raises:
        UnsupportedJointType: If the joint type is not supported
        MissingAxis: If a single-axis joint has no usable axis
        MalformedDescription: If a limited joint has no limit record
    """
    joint_type = JointType.from_string(raw.type, raw.name)
    joint = Joint(
        name=raw.name,
        type=joint_type,
        parent=raw.parent,
        child=raw.child,
        origin=raw.origin,
    )
    _RESOLVERS[joint_type](joint, raw)

    logger.debug(
        f"Classified joint {raw.name}: {joint_type.value} "
        f"drives={[a.value for a in joint.drive_axes]} limits={joint.has_limits}"
    )
    return joint
