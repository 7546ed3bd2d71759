"""Error taxonomy for robot description compilation.

Every error is fatal to a compilation: the caller receives either a complete
tree or one of these exceptions naming the offending link, joint or material.
"""

from typing import Optional


class DescriptionError(ValueError):
    """Base class for all description compilation errors."""

    kind = "description_error"

    def __init__(self, message: str, subject: Optional[str] = None):
        """Initialize the error.

        Args:
            message: Human readable description of the problem
            subject: Name of the offending link, joint or material, if any
        """
        super().__init__(message)
        self.subject = subject


class MalformedDescription(DescriptionError):
    """A required node or attribute is absent, or the joint graph is not a tree."""

    kind = "malformed_description"


class UnsupportedJointType(DescriptionError):
    """The joint type is outside the supported set (e.g. planar)."""

    kind = "unsupported_joint_type"


class AmbiguousRoot(DescriptionError):
    """Not exactly one link is left unclaimed by the joints."""

    kind = "ambiguous_root"


class MissingAxis(DescriptionError):
    """A single-axis joint has a zero, multi-component or absent axis vector."""

    kind = "missing_axis"


class MissingAsset(DescriptionError):
    """An asset lookup reported absence where the asset is required."""

    kind = "missing_asset"
