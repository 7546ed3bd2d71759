"""Core functionality for URDF Articulator.

This module contains the description parser, the kinematic tree builder
and the passes that turn the tree into an engine-ready articulation.
"""

__all__ = []
