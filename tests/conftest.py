"""Pytest configuration and shared fixtures.

This module provides fixtures and configuration for all tests.
"""

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest


@pytest.fixture
def temp_workspace() -> Generator[Path, None, None]:
    """Create a temporary workspace for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        workspace = Path(tmpdir)
        yield workspace


@pytest.fixture
def arm_urdf() -> str:
    """Provide a small arm with every supported single-axis joint.

    Tree (links in declaration order)::

        base_link
        ├── shoulder_link   (revolute, z)
        │   ├── slider_link (prismatic, x)
        │   │   └── tool_frame (fixed, 0.001 kg, no mesh)
        │   └── camera_link (fixed, no inertial)
        └── wheel_link      (continuous, y)
    """
    return """<?xml version="1.0"?>
<robot name="test_arm">
  <material name="blue">
    <color rgba="0 0 0.8 1"/>
  </material>

  <link name="base_link">
    <inertial>
      <origin xyz="0 0 0.05" rpy="0 0 0"/>
      <mass value="5.0"/>
    </inertial>
    <visual>
      <origin xyz="0 0 0" rpy="0 0 0"/>
      <geometry>
        <mesh filename="package://test_arm/meshes/base.dae"/>
      </geometry>
      <material name="blue"/>
    </visual>
  </link>

  <link name="shoulder_link">
    <inertial>
      <mass value="2.0"/>
    </inertial>
    <visual>
      <origin xyz="0.1 0.2 0.3" rpy="0 0 0"/>
      <geometry>
        <mesh filename="package://test_arm/meshes/shoulder.dae"/>
      </geometry>
      <material name="red">
        <color rgba="0.8 0 0 1"/>
      </material>
    </visual>
  </link>

  <link name="wheel_link">
    <inertial>
      <mass value="0.5"/>
    </inertial>
    <visual>
      <geometry>
        <cylinder radius="0.1" length="0.05"/>
      </geometry>
    </visual>
  </link>

  <link name="slider_link">
    <inertial>
      <mass value="1.0"/>
    </inertial>
    <visual>
      <geometry>
        <mesh filename="meshes/slider.stl"/>
      </geometry>
      <material name="undeclared"/>
    </visual>
  </link>

  <link name="tool_frame">
    <inertial>
      <mass value="0.001"/>
    </inertial>
  </link>

  <link name="camera_link"/>

  <joint name="shoulder_joint" type="revolute">
    <parent link="base_link"/>
    <child link="shoulder_link"/>
    <origin xyz="0 0 0.5" rpy="0 0 1.5707963267948966"/>
    <axis xyz="0 0 1"/>
    <limit lower="-1.57" upper="1.57" effort="100" velocity="2"/>
  </joint>

  <joint name="wheel_joint" type="continuous">
    <parent link="base_link"/>
    <child link="wheel_link"/>
    <origin xyz="0.2 0.1 0" rpy="0 0 0"/>
    <axis xyz="0 1 0"/>
  </joint>

  <joint name="slider_joint" type="prismatic">
    <parent link="shoulder_link"/>
    <child link="slider_link"/>
    <origin xyz="0.3 0 0" rpy="0 0 0"/>
    <axis xyz="1 0 0"/>
    <limit lower="0" upper="0.4" velocity="0.5"/>
  </joint>

  <joint name="tool_joint" type="fixed">
    <parent link="slider_link"/>
    <child link="tool_frame"/>
    <origin xyz="0.1 0 0" rpy="0 0 0"/>
  </joint>

  <joint name="camera_joint" type="fixed">
    <parent link="shoulder_link"/>
    <child link="camera_link"/>
    <origin xyz="0 0 0.1" rpy="0 0 0"/>
  </joint>
</robot>"""


@pytest.fixture
def make_robot() -> Callable[[str], str]:
    """Wrap link and joint elements into a ``<robot>`` document."""

    def _make_robot(body: str, name: str = "robot") -> str:
        return f'<?xml version="1.0"?>\n<robot name="{name}">\n{body}\n</robot>'

    return _make_robot


@pytest.fixture
def capture_logs(caplog):
    """Fixture to capture log messages during tests."""
    with caplog.at_level("DEBUG"):
        yield caplog


# Markers for test categorization
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (full compilation pipeline)")
