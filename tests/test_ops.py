"""Tests for structure cleaning and rigid-body transforms."""

import math

import numpy as np
import pytest

from moltopo.model.atom import Atom
from moltopo.model.chain import Chain
from moltopo.model.geometry import Point, box_vectors_from_cell
from moltopo.model.residue import Residue
from moltopo.model.structure import Structure
from moltopo.model.types import Element, ResidueCategory
from moltopo.ops import CleanConfig, Transform, clean_structure
from moltopo.ops.transform import euler_matrix, rotation_matrix_x, rotation_matrix_y, rotation_matrix_z


def _atom(name, x=0.0, y=0.0, z=0.0):
    return Atom(name, Element.guess(name), Point(x, y, z))


@pytest.fixture
def mixed() -> Structure:
    """Protein chain with water/ion/ligand, plus a chain holding only water."""
    a = Chain("A")
    a.add_residue(Residue.with_atoms(1, "ALA", [_atom("N"), _atom("H"), _atom("CA", 1.5), _atom("HA", 1.5, 1.0)]))
    a.add_residue(Residue.with_atoms(101, "HOH", [_atom("O", 5.0)], category=ResidueCategory.WATER))
    a.add_residue(Residue.with_atoms(201, "NA", [Atom("NA", Element.NA, Point(6, 0, 0))],
                                     category=ResidueCategory.ION))
    a.add_residue(Residue.with_atoms(301, "LIG", [_atom("C1", 7.0)], category=ResidueCategory.HETERO))
    w = Chain("W")
    w.add_residue(Residue.with_atoms(1, "WAT", [_atom("O", 9.0)], category=ResidueCategory.WATER))
    return Structure(chains=[a, w])


def _names(s: Structure) -> list[str]:
    return [r.name for r in s.iter_residues()]


# -- Clean tests ---------------------------------------------------------------


class TestCleanStructure:
    def test_noop(self, mixed):
        clean_structure(mixed, CleanConfig())
        assert _names(mixed) == ["ALA", "HOH", "NA", "LIG", "WAT"]

    def test_water_only(self, mixed):
        result = clean_structure(mixed, CleanConfig.water_only())
        assert result is mixed
        assert _names(mixed) == ["ALA", "NA", "LIG"]
        assert mixed.chain_ids == ["A"]

    def test_water_and_ions(self, mixed):
        clean_structure(mixed, CleanConfig.water_and_ions())
        assert _names(mixed) == ["ALA", "LIG"]

    def test_hetero(self, mixed):
        clean_structure(mixed, CleanConfig(remove_hetero=True))
        assert "LIG" not in _names(mixed)

    def test_hydrogens(self, mixed):
        clean_structure(mixed, CleanConfig(remove_hydrogens=True))
        assert [a.name for a in mixed.chain("A").residue(1)] == ["N", "CA"]

    def test_by_name(self, mixed):
        clean_structure(mixed, CleanConfig(remove_residue_names={"LIG", "NA"}))
        assert _names(mixed) == ["ALA", "HOH", "WAT"]

    def test_keep_wins(self, mixed):
        config = CleanConfig(remove_water=True, remove_residue_names={"LIG"}, keep_residue_names={"WAT", "LIG"})
        clean_structure(mixed, config)
        assert _names(mixed) == ["ALA", "NA", "LIG", "WAT"]
        assert mixed.chain_ids == ["A", "W"]


# -- Transform tests -----------------------------------------------------------


class TestTransform:
    def test_translate(self, mixed):
        before = mixed.coordinates()
        Transform.translate(mixed, 1.0, -2.0, 3.0)
        np.testing.assert_allclose(mixed.coordinates() - before, np.tile([1.0, -2.0, 3.0], (len(before), 1)))

    def test_center_geometry(self, mixed):
        Transform.center_geometry(mixed)
        np.testing.assert_allclose(mixed.geometric_center().as_array(), 0.0, atol=1e-12)

    def test_center_geometry_target(self, mixed):
        Transform.center_geometry(mixed, Point(1.0, 2.0, 3.0))
        np.testing.assert_allclose(mixed.geometric_center().as_array(), [1.0, 2.0, 3.0])

    def test_center_mass(self, mixed):
        Transform.center_mass(mixed)
        np.testing.assert_allclose(mixed.center_of_mass().as_array(), 0.0, atol=1e-12)

    def test_rotate_z_quarter_turn(self):
        chain = Chain("A")
        chain.add_residue(Residue.with_atoms(1, "LIG", [_atom("C1", 1.0)], category=ResidueCategory.HETERO))
        s = Structure(chains=[chain])
        Transform.rotate_z(s, math.pi / 2)
        p = s.chain("A").residue(1).atom("C1").pos
        assert (p.x, p.y, p.z) == pytest.approx((0.0, 1.0, 0.0))

    def test_rotation_preserves_distances(self, mixed):
        before = mixed.coordinates()
        Transform.rotate_euler(mixed, 0.3, -1.1, 2.0)
        after = mixed.coordinates()
        d_before = np.linalg.norm(before[:, None] - before[None, :], axis=-1)
        d_after = np.linalg.norm(after[:, None] - after[None, :], axis=-1)
        np.testing.assert_allclose(d_before, d_after, atol=1e-9)

    def test_euler_composition(self):
        expected = rotation_matrix_z(0.7) @ rotation_matrix_y(0.2) @ rotation_matrix_x(-0.4)
        np.testing.assert_allclose(euler_matrix(-0.4, 0.2, 0.7), expected)

    def test_single_axis_rotations(self, mixed):
        before = mixed.coordinates()
        Transform.rotate_x(mixed, 0.5)
        Transform.rotate_x(mixed, -0.5)
        Transform.rotate_y(mixed, 1.0)
        Transform.rotate_y(mixed, -1.0)
        np.testing.assert_allclose(mixed.coordinates(), before, atol=1e-9)

    def test_rotation_moves_box(self):
        s = Structure(box_vectors=box_vectors_from_cell(10.0, 10.0, 10.0, 90.0, 90.0, 90.0))
        Transform.rotate_z(s, math.pi / 2)
        v1 = s.box_vectors[0]
        assert (v1.x, v1.y) == pytest.approx((0.0, 10.0), abs=1e-9)

    def test_bad_matrix(self, mixed):
        with pytest.raises(ValueError, match="3x3"):
            Transform.apply_rotation(mixed, np.eye(4))
