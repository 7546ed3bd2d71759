"""Robot description parsing.

This module turns a robot description document into typed link, joint and
material records. No tree structure is built here; see
:mod:`urdf_articulator.core.tree`.
"""

import logging
import xml.etree.ElementTree as ET  # nosec B405 - robot descriptions are trusted
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, Optional, Tuple, Union

from urdf_articulator.core.coordinates import (
    IDENTITY,
    Pose,
    UpAxis,
    convert_pose,
    parse_vector,
    visual_rotation,
)
from urdf_articulator.core.errors import MalformedDescription
from urdf_articulator.core.joints import Joint, RawJoint, RawLimit, classify_joint

logger = logging.getLogger(__name__)

DEFAULT_MATERIAL_NAME = "default"
PACKAGE_SCHEME = "package://"


@dataclass
class Material:
    """Named surface color."""

    name: str
    rgba: Tuple[float, float, float, float]
    metallic: float = 0.75
    glossiness: float = 0.75


DEFAULT_MATERIAL = Material(name=DEFAULT_MATERIAL_NAME, rgba=(0.33, 0.33, 0.33, 0.0))


@dataclass
class Link:
    """Rigid body record."""

    name: str
    mass: float = 0.0
    has_mesh: bool = False
    mesh_path: str = ""
    mesh_pose: Pose = IDENTITY
    inertial_pose: Pose = IDENTITY
    material_name: str = DEFAULT_MATERIAL_NAME
    is_sensor_only: bool = False

    @property
    def asset_path(self) -> str:
        """Mesh reference with the ``package://`` scheme stripped."""
        if self.mesh_path.startswith(PACKAGE_SCHEME):
            return self.mesh_path[len(PACKAGE_SCHEME):]
        return self.mesh_path


@dataclass
class RobotDescription:
    """Parsed robot description.

    Joints are keyed by the name of their child link: a link is claimed as
    child by at most one joint.
    """

    robot_name: str
    links: Dict[str, Link] = field(default_factory=dict)
    joints: Dict[str, Joint] = field(default_factory=dict)
    materials: Dict[str, Material] = field(default_factory=dict)

    @classmethod
    def from_string(cls, content: str, up_axis: UpAxis = UpAxis.Y) -> "RobotDescription":
        """Parse a robot description from string content.

        Args:
            content: Description XML content as string
            up_axis: Up axis of the target engine

        Returns:
            RobotDescription instance

        Raises:
            MalformedDescription: If the document is not well formed or a
                required node or attribute is missing
            UnsupportedJointType: If a joint type is not supported
            MissingAxis: If a single-axis joint has no usable axis
        """
        try:
            root = ET.fromstring(content)  # nosec B314 - descriptions from trusted sources
        except ET.ParseError as e:
            raise MalformedDescription(f"Invalid description XML: {e}")
        return DescriptionParser(up_axis).parse(root)

    @classmethod
    def from_file(cls, file_path: Union[Path, str], up_axis: UpAxis = UpAxis.Y) -> "RobotDescription":
        """Parse a robot description from file.

        Args:
            file_path: Path to the description file
            up_axis: Up axis of the target engine

        Returns:
            RobotDescription instance

        Raises:
            FileNotFoundError: If file does not exist
            PermissionError: If file cannot be read
            IOError: If reading fails
        """
        try:
            with open(file_path, "r") as f:
                content = f.read()
        except FileNotFoundError:
            raise FileNotFoundError(f"Description file not found: {file_path}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading file: {file_path}")
        except OSError as e:
            raise IOError(f"Error reading description file {file_path}: {e}")

        return cls.from_string(content, up_axis)


def _require(elem: ET.Element, attribute: str, subject: Optional[str]) -> str:
    value = elem.get(attribute)
    if value is None or not value.strip():
        raise MalformedDescription(
            f"<{elem.tag}> is missing attribute '{attribute}' ({subject})",
            subject,
        )
    return value


def _parse_float(value: str, subject: Optional[str]) -> float:
    try:
        return float(value)
    except ValueError:
        raise MalformedDescription(f"Invalid number '{value}' for: {subject}", subject)


def _parse_rgba(value: str, subject: Optional[str]) -> Tuple[float, float, float, float]:
    rgba = parse_vector(value, subject, size=4)
    if any(not 0.0 <= c <= 1.0 for c in rgba):
        raise MalformedDescription(f"RGBA components must be in [0, 1]: '{value}' ({subject})", subject)
    return rgba


class DescriptionParser:
    """Extracts link, joint and material records from a description tree."""

    def __init__(self, up_axis: UpAxis = UpAxis.Y):
        """Initialize the parser.

        Args:
            up_axis: Up axis of the target engine
        """
        self.up_axis = UpAxis(up_axis)

    def parse(self, root: ET.Element) -> RobotDescription:
        """Parse a ``<robot>`` element.

        Args:
            root: XML root element

        Returns:
            RobotDescription with links, joints and materials
        """
        if root.tag != "robot":
            raise MalformedDescription(f"Expected a <robot> root element, got <{root.tag}>")

        description = RobotDescription(robot_name=root.get("name", "robot"))
        description.materials[DEFAULT_MATERIAL_NAME] = DEFAULT_MATERIAL

        for material_elem in root.findall("material"):
            material = self._parse_material(material_elem)
            description.materials[material.name] = material

        for link_elem in root.findall("link"):
            link = self._parse_link(link_elem, description.materials)
            if link.name in description.links:
                raise MalformedDescription(f"Duplicate link name: {link.name}", link.name)
            description.links[link.name] = link

        joint_names = set()
        for joint_elem in root.findall("joint"):
            joint = classify_joint(self._parse_joint(joint_elem))
            if joint.name in joint_names:
                raise MalformedDescription(f"Duplicate joint name: {joint.name}", joint.name)
            joint_names.add(joint.name)
            self._check_references(joint, description)
            description.joints[joint.child] = joint

        for link in description.links.values():
            if link.material_name not in description.materials:
                logger.warning(
                    f"Link {link.name} references undeclared material "
                    f"'{link.material_name}', using '{DEFAULT_MATERIAL_NAME}'"
                )
                link.material_name = DEFAULT_MATERIAL_NAME

        logger.info(
            f"Parsed robot {description.robot_name}: {len(description.links)} links, "
            f"{len(description.joints)} joints, {len(description.materials)} materials"
        )
        return description

    def _check_references(self, joint: Joint, description: RobotDescription) -> None:
        for role, link_name in (("parent", joint.parent), ("child", joint.child)):
            if link_name not in description.links:
                raise MalformedDescription(
                    f"Joint {joint.name} references unknown {role} link: {link_name}",
                    joint.name,
                )
        if joint.child in description.joints:
            other = description.joints[joint.child].name
            raise MalformedDescription(
                f"Link {joint.child} is the child of both {other} and {joint.name}",
                joint.name,
            )

    def _parse_pose(self, origin: Optional[ET.Element], subject: str) -> Pose:
        if origin is None:
            return IDENTITY
        xyz = parse_vector(origin.get("xyz", "0 0 0"), subject)
        rpy = parse_vector(origin.get("rpy", "0 0 0"), subject)
        return convert_pose(xyz, rpy, self.up_axis)

    def _parse_material(self, elem: ET.Element) -> Material:
        name = _require(elem, "name", None)
        color = elem.find("color")
        if color is None:
            logger.warning(f"Material {name} has no color, using the default color")
            return Material(name=name, rgba=DEFAULT_MATERIAL.rgba)
        return Material(name=name, rgba=_parse_rgba(_require(color, "rgba", name), name))

    def _parse_link(self, elem: ET.Element, materials: Dict[str, Material]) -> Link:
        name = _require(elem, "name", None)

        inertial = elem.find("inertial")
        # No inertial data: a camera or other non-physical marker.
        if inertial is None:
            return Link(name=name, is_sensor_only=True)

        mass_elem = inertial.find("mass")
        if mass_elem is None:
            raise MalformedDescription(f"Link has no mass: {name}", name)
        mass = _parse_float(_require(mass_elem, "value", name), name)
        if mass < 0:
            raise MalformedDescription(f"Link mass must not be negative: {name} ({mass})", name)

        link = Link(
            name=name,
            mass=mass,
            inertial_pose=self._parse_pose(inertial.find("origin"), name),
        )

        visual = elem.find("visual")
        if visual is None:
            return link

        material_elem = visual.find("material")
        if material_elem is not None:
            link.material_name = self._parse_visual_material(material_elem, name, materials)

        mesh = visual.find("geometry/mesh")
        # Some visuals are primitives rather than meshes.
        if mesh is None:
            return link

        link.has_mesh = True
        link.mesh_path = _require(mesh, "filename", name)
        if not PurePosixPath(link.asset_path).name:
            raise MalformedDescription(f"Mesh reference names no asset: '{link.mesh_path}' ({name})", name)
        pose = self._parse_pose(visual.find("origin"), name)
        link.mesh_pose = Pose(position=pose.position, rotation=visual_rotation(pose.rotation, self.up_axis))
        return link

    def _parse_visual_material(self, elem: ET.Element, link_name: str, materials: Dict[str, Material]) -> str:
        name = elem.get("name") or DEFAULT_MATERIAL_NAME
        color = elem.find("color")
        if color is not None and name not in materials:
            materials[name] = Material(name=name, rgba=_parse_rgba(_require(color, "rgba", link_name), link_name))
        return name

    def _parse_joint(self, elem: ET.Element) -> RawJoint:
        name = _require(elem, "name", None)

        references = {}
        for role in ("parent", "child"):
            ref = elem.find(role)
            if ref is None:
                raise MalformedDescription(f"Joint has no {role}: {name}", name)
            references[role] = _require(ref, "link", name)

        origin = elem.find("origin")
        if origin is None:
            raise MalformedDescription(f"Joint has no origin: {name}", name)

        raw = RawJoint(
            name=name,
            type=elem.get("type", ""),
            parent=references["parent"],
            child=references["child"],
            origin=self._parse_pose(origin, name),
        )

        axis = elem.find("axis")
        if axis is not None:
            raw.axis = parse_vector(axis.get("xyz", "1 0 0"), name)

        limit = elem.find("limit")
        if limit is not None:
            velocity = limit.get("velocity")
            raw.limit = RawLimit(
                lower=_parse_float(limit.get("lower", "0"), name),
                upper=_parse_float(limit.get("upper", "0"), name),
                velocity=_parse_float(velocity, name) if velocity is not None else None,
            )

        return raw
