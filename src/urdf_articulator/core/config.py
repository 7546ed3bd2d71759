"""Compiler configuration model and loader.

This module provides the Pydantic model holding the options of a
compilation, loadable from and savable to YAML.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from urdf_articulator.core.collision import CollisionSource
from urdf_articulator.core.coordinates import UpAxis
from urdf_articulator.core.pruning import DEFAULT_MASS_THRESHOLD


class CompilerConfig(BaseModel):
    """Options of a robot description compilation."""
    model_config = ConfigDict(extra="forbid")

    up_axis: UpAxis = Field(UpAxis.Y, description="Up axis of the target engine")
    immovable_root: bool = Field(True, description="Mark the root node immovable")
    prune: bool = Field(True, description="Remove redundant nodes")
    prune_mass_threshold: float = Field(
        DEFAULT_MASS_THRESHOLD, ge=0, description="Fixed nodes lighter than this may be pruned"
    )
    prune_require_no_mesh: bool = Field(True, description="Never prune nodes whose subtree has a mesh")
    collision_source: CollisionSource = Field(
        CollisionSource.ENGINE_NATIVE, description="Collision asset naming convention"
    )
    require_collision: bool = Field(False, description="Fail when a collision asset is missing")
    rename_root: bool = Field(True, description="Name the root node after the robot")

    @field_validator('up_axis', 'collision_source', mode='before')
    def validate_choice(cls, v: Any, info) -> Any:
        """Normalize enum options given as strings.

        Args:
            v: Value to validate
            info: Validation info naming the field

        Returns:
            Validated value

        Raises:
            ValueError: If the value is not one of the allowed choices
        """
        enum_type = UpAxis if info.field_name == 'up_axis' else CollisionSource
        if isinstance(v, str):
            try:
                return enum_type(v.strip().lower())
            except ValueError:
                choices = [e.value for e in enum_type]
                raise ValueError(
                    f"Invalid {info.field_name}: '{v}'. "
                    f"Must be one of: {', '.join(choices)}"
                )
        return v

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CompilerConfig':
        """Create CompilerConfig from dictionary.

        Args:
            data: Dictionary of options; missing options take their defaults

        Returns:
            CompilerConfig instance

        Raises:
            ValueError: If an option is unknown or invalid
        """
        return cls(**(data or {}))

    @classmethod
    def from_yaml(cls, file_path: Path) -> 'CompilerConfig':
        """Load CompilerConfig from YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            CompilerConfig instance

        Raises:
            FileNotFoundError: If file does not exist
            PermissionError: If file cannot be read
            ValueError: If YAML parsing fails
        """
        try:
            with open(file_path, 'r') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Config file not found: {file_path}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading file: {file_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in file {file_path}: {e}")

        if data is not None and not isinstance(data, dict):
            raise ValueError(f"Config file {file_path} must contain a mapping of options")

        return cls.from_dict(data)

    def to_yaml(self, file_path: Path) -> None:
        """Save CompilerConfig to YAML file.

        Args:
            file_path: Path to save YAML file

        Raises:
            PermissionError: If file cannot be written
        """
        data = self.model_dump()
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value

        try:
            with open(file_path, 'w') as f:
                yaml.safe_dump(data, f, default_flow_style=False)
        except PermissionError:
            raise PermissionError(f"Permission denied writing to file: {file_path}")
