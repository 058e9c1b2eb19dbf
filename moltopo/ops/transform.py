"""Rigid-body transforms applied in place to a ``Structure``.

Rotations act about the coordinate origin and also rotate the periodic box
vectors when the structure carries them.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from moltopo.model.geometry import Point
from moltopo.model.structure import Structure


def rotation_matrix_x(radians: float) -> np.ndarray:
    c, s = np.cos(radians), np.sin(radians)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def rotation_matrix_y(radians: float) -> np.ndarray:
    c, s = np.cos(radians), np.sin(radians)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def rotation_matrix_z(radians: float) -> np.ndarray:
    c, s = np.cos(radians), np.sin(radians)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def euler_matrix(x_rad: float, y_rad: float, z_rad: float) -> np.ndarray:
    """Roll about x, then pitch about y, then yaw about z (``Rz @ Ry @ Rx``)."""
    return rotation_matrix_z(z_rad) @ rotation_matrix_y(y_rad) @ rotation_matrix_x(x_rad)


class Transform:
    """Namespace of in-place structure transforms."""

    @staticmethod
    def translate(structure: Structure, x: float, y: float, z: float) -> None:
        shift = Point(x, y, z)
        for atom in structure.iter_atoms():
            atom.translate_by(shift)

    @staticmethod
    def center_geometry(structure: Structure, target: Optional[Point] = None) -> None:
        """Move the geometric center onto ``target`` (origin by default)."""
        target = Point.origin() if target is None else target
        shift = target - structure.geometric_center()
        for atom in structure.iter_atoms():
            atom.translate_by(shift)

    @staticmethod
    def center_mass(structure: Structure, target: Optional[Point] = None) -> None:
        """Move the mass-weighted center onto ``target`` (origin by default)."""
        target = Point.origin() if target is None else target
        shift = target - structure.center_of_mass()
        for atom in structure.iter_atoms():
            atom.translate_by(shift)

    @staticmethod
    def rotate_x(structure: Structure, radians: float) -> None:
        Transform.apply_rotation(structure, rotation_matrix_x(radians))

    @staticmethod
    def rotate_y(structure: Structure, radians: float) -> None:
        Transform.apply_rotation(structure, rotation_matrix_y(radians))

    @staticmethod
    def rotate_z(structure: Structure, radians: float) -> None:
        Transform.apply_rotation(structure, rotation_matrix_z(radians))

    @staticmethod
    def rotate_euler(structure: Structure, x_rad: float, y_rad: float, z_rad: float) -> None:
        Transform.apply_rotation(structure, euler_matrix(x_rad, y_rad, z_rad))

    @staticmethod
    def apply_rotation(structure: Structure, rotation: np.ndarray) -> None:
        rotation = np.asarray(rotation, dtype=float)
        if rotation.shape != (3, 3):
            raise ValueError(f"Rotation must be a 3x3 matrix, got shape {rotation.shape}")

        for atom in structure.iter_atoms():
            atom.pos = Point.from_iterable(rotation @ atom.pos.as_array())

        if structure.box_vectors is not None:
            v1, v2, v3 = (Point.from_iterable(rotation @ v.as_array()) for v in structure.box_vectors)
            structure.box_vectors = (v1, v2, v3)
