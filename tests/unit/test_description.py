"""Unit tests for robot description parsing."""

from pathlib import Path

import numpy as np
import pytest

from urdf_articulator.core.coordinates import UpAxis
from urdf_articulator.core.description import DEFAULT_MATERIAL_NAME, RobotDescription
from urdf_articulator.core.errors import MalformedDescription, MissingAxis, UnsupportedJointType
from urdf_articulator.core.joints import DriveAxis, JointType

LINK = '<link name="{name}"><inertial><mass value="1.0"/></inertial></link>'


class TestRobotDescription:
    """Test parsing the sample arm."""

    @pytest.mark.unit
    def test_parse_from_string(self, arm_urdf: str):
        """Test parsing links, joints and materials from string content."""
        description = RobotDescription.from_string(arm_urdf)

        assert description.robot_name == "test_arm"
        assert len(description.links) == 6
        assert len(description.joints) == 5
        assert set(description.materials) == {DEFAULT_MATERIAL_NAME, "blue", "red"}

    @pytest.mark.unit
    def test_parse_from_file(self, arm_urdf: str, temp_workspace: Path):
        """Test parsing from file."""
        urdf_file = temp_workspace / "robot.urdf"
        urdf_file.write_text(arm_urdf)

        description = RobotDescription.from_file(urdf_file)

        assert description.robot_name == "test_arm"
        assert "base_link" in description.links

    @pytest.mark.unit
    def test_file_not_found(self, temp_workspace: Path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="not found"):
            RobotDescription.from_file(temp_workspace / "missing.urdf")

    @pytest.mark.unit
    def test_joints_keyed_by_child(self, arm_urdf: str):
        """Test that joints are indexed by their child link."""
        description = RobotDescription.from_string(arm_urdf)

        assert description.joints["shoulder_link"].name == "shoulder_joint"
        assert description.joints["tool_frame"].type == JointType.FIXED
        assert "base_link" not in description.joints

    @pytest.mark.unit
    def test_mesh_link(self, arm_urdf: str):
        """Test a link with inertial data and a visual mesh."""
        link = RobotDescription.from_string(arm_urdf).links["base_link"]

        assert link.mass == 5.0
        assert link.has_mesh
        assert link.mesh_path == "package://test_arm/meshes/base.dae"
        assert link.asset_path == "test_arm/meshes/base.dae"
        assert link.material_name == "blue"
        assert not link.is_sensor_only
        assert link.inertial_pose.position == (0.0, 0.05, 0.0)
        assert link.mesh_pose.rotation == (-90.0, 0.0, 90.0)

    @pytest.mark.unit
    def test_mesh_pose_converted(self, arm_urdf: str):
        """Test that the visual origin is converted to engine space."""
        link = RobotDescription.from_string(arm_urdf).links["shoulder_link"]

        assert np.allclose(link.mesh_pose.position, (-0.2, 0.3, 0.1))

    @pytest.mark.unit
    def test_sensor_only_link(self, arm_urdf: str):
        """Test that a link without inertial data is a sensor marker."""
        link = RobotDescription.from_string(arm_urdf).links["camera_link"]

        assert link.is_sensor_only
        assert link.mass == 0.0
        assert not link.has_mesh
        assert link.mesh_path == ""

    @pytest.mark.unit
    def test_primitive_visual_has_no_mesh(self, arm_urdf: str):
        """Test that primitive geometry does not count as a mesh."""
        link = RobotDescription.from_string(arm_urdf).links["wheel_link"]

        assert not link.has_mesh
        assert link.material_name == DEFAULT_MATERIAL_NAME

    @pytest.mark.unit
    def test_inline_material(self, arm_urdf: str):
        """Test that a colored material inside a visual is registered."""
        description = RobotDescription.from_string(arm_urdf)

        assert description.links["shoulder_link"].material_name == "red"
        assert description.materials["red"].rgba == (0.8, 0.0, 0.0, 1.0)

    @pytest.mark.unit
    def test_default_material(self, arm_urdf: str):
        """Test that the default material always exists."""
        material = RobotDescription.from_string(arm_urdf).materials[DEFAULT_MATERIAL_NAME]

        assert material.rgba == (0.33, 0.33, 0.33, 0.0)
        assert material.metallic == 0.75
        assert material.glossiness == 0.75

    @pytest.mark.unit
    def test_undeclared_material_falls_back(self, arm_urdf: str, capture_logs):
        """Test that unknown material references use the default material."""
        description = RobotDescription.from_string(arm_urdf)

        assert description.links["slider_link"].material_name == DEFAULT_MATERIAL_NAME
        assert "undeclared" in capture_logs.text

    @pytest.mark.unit
    def test_joint_records(self, arm_urdf: str):
        """Test parsed and classified joint records."""
        joints = RobotDescription.from_string(arm_urdf).joints

        shoulder = joints["shoulder_link"]
        assert shoulder.parent == "base_link"
        assert shoulder.drive_axes == [DriveAxis.Z]
        assert np.allclose(shoulder.origin.position, (0.0, 0.5, 0.0))
        assert np.allclose(shoulder.origin.rotation, (0.0, -90.0, 0.0))

        assert joints["wheel_link"].drive_axes == [DriveAxis.Y]
        assert joints["slider_link"].upper_limit == 0.4

    @pytest.mark.unit
    def test_z_up_variant(self, arm_urdf: str):
        """Test that the up axis selects the conversion variant."""
        description = RobotDescription.from_string(arm_urdf, up_axis=UpAxis.Z)

        wheel = description.joints["wheel_link"]
        assert np.allclose(wheel.origin.position, (0.2, -0.1, 0.0))
        assert description.links["base_link"].mesh_pose.rotation == (0.0, 0.0, 0.0)


class TestMalformedDescriptions:
    """Test that invalid documents fail with a descriptive error."""

    @pytest.mark.unit
    def test_invalid_xml(self):
        """Test that syntax errors are malformed descriptions."""
        with pytest.raises(MalformedDescription, match="Invalid description XML"):
            RobotDescription.from_string("<robot name='r'><link name='a'></robot>")

    @pytest.mark.unit
    def test_wrong_root_element(self):
        """Test that the document must be a robot."""
        with pytest.raises(MalformedDescription, match="<robot>"):
            RobotDescription.from_string("<world name='w'/>")

    @pytest.mark.unit
    def test_missing_mass(self, make_robot):
        """Test that an inertial record without mass is malformed."""
        urdf = make_robot('<link name="a"><inertial><origin xyz="0 0 0"/></inertial></link>')

        with pytest.raises(MalformedDescription) as exc_info:
            RobotDescription.from_string(urdf)

        assert exc_info.value.subject == "a"

    @pytest.mark.unit
    def test_negative_mass(self, make_robot):
        """Test that negative masses are rejected."""
        urdf = make_robot('<link name="a"><inertial><mass value="-1"/></inertial></link>')

        with pytest.raises(MalformedDescription, match="negative"):
            RobotDescription.from_string(urdf)

    @pytest.mark.unit
    def test_non_numeric_mass(self, make_robot):
        """Test that non-numeric masses are rejected."""
        urdf = make_robot('<link name="a"><inertial><mass value="heavy"/></inertial></link>')

        with pytest.raises(MalformedDescription, match="heavy"):
            RobotDescription.from_string(urdf)

    @pytest.mark.unit
    def test_missing_origin(self, make_robot):
        """Test that a joint without origin is malformed."""
        urdf = make_robot(
            LINK.format(name="a") + LINK.format(name="b")
            + '<joint name="j" type="fixed"><parent link="a"/><child link="b"/></joint>'
        )

        with pytest.raises(MalformedDescription, match="origin"):
            RobotDescription.from_string(urdf)

    @pytest.mark.unit
    @pytest.mark.parametrize("missing", ["parent", "child"])
    def test_missing_reference(self, make_robot, missing: str):
        """Test that a joint needs both parent and child references."""
        refs = {"parent": '<parent link="a"/>', "child": '<child link="b"/>'}
        refs.pop(missing)
        urdf = make_robot(
            LINK.format(name="a") + LINK.format(name="b")
            + f'<joint name="j" type="fixed">{"".join(refs.values())}<origin xyz="0 0 0"/></joint>'
        )

        with pytest.raises(MalformedDescription, match=missing):
            RobotDescription.from_string(urdf)

    @pytest.mark.unit
    def test_unknown_child_link(self, make_robot):
        """Test that a joint to an undeclared link is malformed, not a crash."""
        urdf = make_robot(
            LINK.format(name="a")
            + '<joint name="j" type="fixed"><parent link="a"/><child link="ghost"/>'
              '<origin xyz="0 0 0"/></joint>'
        )

        with pytest.raises(MalformedDescription, match="ghost"):
            RobotDescription.from_string(urdf)

    @pytest.mark.unit
    def test_duplicate_link(self, make_robot):
        """Test that link names must be unique."""
        with pytest.raises(MalformedDescription, match="Duplicate link"):
            RobotDescription.from_string(make_robot(LINK.format(name="a") * 2))

    @pytest.mark.unit
    def test_child_claimed_twice(self, make_robot):
        """Test that a link can be the child of one joint only."""
        joint = ('<joint name="{name}" type="fixed"><parent link="{parent}"/><child link="c"/>'
                 '<origin xyz="0 0 0"/></joint>')
        urdf = make_robot(
            LINK.format(name="a") + LINK.format(name="b") + LINK.format(name="c")
            + joint.format(name="j1", parent="a") + joint.format(name="j2", parent="b")
        )

        with pytest.raises(MalformedDescription, match="child of both"):
            RobotDescription.from_string(urdf)

    @pytest.mark.unit
    def test_invalid_rgba(self, make_robot):
        """Test that colors must have four components in [0, 1]."""
        urdf = make_robot('<material name="m"><color rgba="1 0 2 1"/></material>')

        with pytest.raises(MalformedDescription, match="RGBA"):
            RobotDescription.from_string(urdf)

    @pytest.mark.unit
    def test_planar_joint(self, make_robot):
        """Test that planar joints are unsupported."""
        urdf = make_robot(
            LINK.format(name="a") + LINK.format(name="b")
            + '<joint name="plane" type="planar"><parent link="a"/><child link="b"/>'
              '<origin xyz="0 0 0"/><axis xyz="0 0 1"/></joint>'
        )

        with pytest.raises(UnsupportedJointType, match="planar"):
            RobotDescription.from_string(urdf)

    @pytest.mark.unit
    def test_missing_axis_element(self, make_robot):
        """Test that a single-axis joint without an axis fails with MissingAxis."""
        urdf = make_robot(
            LINK.format(name="a") + LINK.format(name="b")
            + '<joint name="spin" type="continuous"><parent link="a"/><child link="b"/>'
              '<origin xyz="0 0 0"/></joint>'
        )

        with pytest.raises(MissingAxis, match="spin"):
            RobotDescription.from_string(urdf)

    @pytest.mark.unit
    @pytest.mark.parametrize("filename", ["package://", "/", "package:///"])
    def test_mesh_without_asset_name(self, make_robot, filename: str):
        """Test that a mesh reference must name an asset."""
        urdf = make_robot(
            '<link name="a"><inertial><mass value="1.0"/></inertial>'
            f'<visual><geometry><mesh filename="{filename}"/></geometry></visual></link>'
        )

        with pytest.raises(MalformedDescription, match="names no asset"):
            RobotDescription.from_string(urdf)
