"""Tests for the structure model: primitives, hierarchy, templates, bonds, topology."""

import math
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from moltopo.core.errors import DuplicateAtomError, DuplicateResidueError, TemplateError
from moltopo.model.atom import Atom
from moltopo.model.chain import Chain
from moltopo.model.geometry import Point, box_vectors_from_cell, cell_from_box_vectors
from moltopo.model.residue import Residue
from moltopo.model.structure import Structure
from moltopo.model.template import Template
from moltopo.model.topology import Bond, Topology
from moltopo.model.types import (
    BondOrder,
    Element,
    PolymerClass,
    ResidueCategory,
    StandardResidue,
)


def _atom(name: str, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> Atom:
    return Atom(name, Element.guess(name), Point(x, y, z))


def _two_chain_structure() -> Structure:
    ala = Residue.with_atoms(1, "ALA", [_atom("N"), _atom("CA", 1.0), _atom("C", 2.0)])
    gly = Residue.with_atoms(2, "GLY", [_atom("N", 3.0), _atom("CA", 4.0)])
    hoh = Residue.with_atoms(101, "HOH", [_atom("O", 10.0)], category=ResidueCategory.WATER)
    a = Chain("A")
    a.add_residue(ala)
    a.add_residue(gly)
    b = Chain("B")
    b.add_residue(hoh)
    return Structure(chains=[a, b])


# -- Primitives --------------------------------------------------------------


class TestPoint:
    def test_arithmetic(self):
        p = Point(1.0, 2.0, 3.0)
        q = Point(0.5, 0.5, 0.5)
        assert p + q == Point(1.5, 2.5, 3.5)
        assert p - q == Point(0.5, 1.5, 2.5)
        assert p * 2 == Point(2.0, 4.0, 6.0)
        assert 2 * p == Point(2.0, 4.0, 6.0)
        assert -q == Point(-0.5, -0.5, -0.5)

    def test_distance(self):
        assert Point(0, 0, 0).distance_squared(Point(1, 2, 2)) == 9.0
        assert Point(0, 0, 0).distance(Point(1, 2, 2)) == 3.0

    def test_angle(self):
        assert Point(1, 0, 0).angle(Point(0, 1, 0)) == pytest.approx(math.pi / 2)
        assert Point(0, 0, 0).angle(Point(1, 0, 0)) == 0.0

    def test_as_array(self):
        arr = Point(1, 2, 3).as_array()
        assert isinstance(arr, np.ndarray)
        assert arr.tolist() == [1.0, 2.0, 3.0]

    def test_cell_roundtrip(self):
        box = box_vectors_from_cell(63.15, 83.59, 53.80, 90.0, 99.34, 90.0)
        a, b, c, alpha, beta, gamma = cell_from_box_vectors(box)
        assert (a, b, c) == pytest.approx((63.15, 83.59, 53.80))
        assert (alpha, beta, gamma) == pytest.approx((90.0, 99.34, 90.0))
        assert box[0] == Point(63.15, 0.0, 0.0)


class TestEnums:
    def test_element_from_symbol(self):
        assert Element.from_symbol("fe") is Element.FE
        assert Element.from_symbol("D") is Element.H
        assert Element.from_symbol("Xx") is Element.UNKNOWN

    def test_element_guess(self):
        assert Element.guess("CA") is Element.C
        assert Element.guess("CA", "CA") is Element.CA
        assert Element.guess("1HB") is Element.H
        assert Element.guess("ZN", "ZN") is Element.ZN

    def test_bond_order_parse(self):
        assert BondOrder.parse("DOUB") is BondOrder.DOUBLE
        assert BondOrder.parse("ar") is BondOrder.AROMATIC
        assert BondOrder.parse("1") is BondOrder.SINGLE
        assert BondOrder.TRIPLE.mmcif_token == "TRIP"
        with pytest.raises(ValueError):
            BondOrder.parse("quadruple")

    def test_standard_residue_aliases(self):
        assert StandardResidue.from_name("HIE") is StandardResidue.HIS
        assert StandardResidue.from_name("cyx") is StandardResidue.CYS
        assert StandardResidue.from_name("WAT") is StandardResidue.HOH
        assert StandardResidue.from_name("LIG") is None

    def test_polymer_class(self):
        assert StandardResidue.ALA.polymer_class is PolymerClass.PROTEIN
        assert StandardResidue.DA.polymer_class is PolymerClass.NUCLEIC
        assert StandardResidue.HOH.polymer_class is PolymerClass.SOLVENT
        assert StandardResidue.HOH.is_water


# -- Hierarchy ---------------------------------------------------------------


class TestResidueAndChain:
    def test_atom_order_preserved(self):
        r = Residue.with_atoms(1, "SER", [_atom("OG"), _atom("N"), _atom("CA")])
        assert [a.name for a in r] == ["OG", "N", "CA"]
        assert r.atom_index("N") == 1
        assert r.atom_index("CB") is None

    def test_duplicate_atom_rejected(self):
        r = Residue(1, "ALA")
        r.add_atom(_atom("CA"))
        with pytest.raises(DuplicateAtomError) as exc:
            r.add_atom(_atom("CA", 1.0))
        assert exc.value.atom_name == "CA"

    def test_standard_name_derived(self):
        assert Residue(1, "HID").standard_name is StandardResidue.HIS
        assert Residue(1, "LIG", category=ResidueCategory.HETERO).standard_name is None
        assert Residue(1, "DA").is_nucleic
        assert Residue(1, "GLY").is_polymer
        assert not Residue(1, "HOH").is_polymer

    def test_strip_hydrogens(self):
        r = Residue.with_atoms(1, "ALA", [_atom("N"), _atom("H"), _atom("CA"), _atom("HA")])
        r.strip_hydrogens()
        assert [a.name for a in r] == ["N", "CA"]

    def test_duplicate_residue_rejected(self):
        c = Chain("A")
        c.add_residue(Residue(5, "ALA"))
        c.add_residue(Residue(5, "GLY", insertion_code="A"))
        with pytest.raises(DuplicateResidueError):
            c.add_residue(Residue(5, "SER"))
        assert c.residue(5, "A").name == "GLY"

    def test_chain_counts(self):
        s = _two_chain_structure()
        chain_a = s.chain("A")
        assert chain_a.residue_count == 2
        assert chain_a.atom_count == 5
        assert s.chain("Z") is None


class TestStructure:
    def test_flat_order(self):
        s = _two_chain_structure()
        assert [a.name for a in s.iter_atoms()] == ["N", "CA", "C", "N", "CA", "O"]
        ctx = list(s.iter_atoms_with_context())
        assert ctx[5][0].id == "B"
        assert ctx[5][1].name == "HOH"

    def test_counts(self):
        s = _two_chain_structure()
        assert s.chain_count == 2
        assert s.residue_count == 3
        assert s.atom_count == 6
        assert s.chain_ids == ["A", "B"]

    def test_residue_offsets(self):
        assert _two_chain_structure().residue_offsets() == [[0, 3], [5]]

    def test_retain_and_prune(self):
        s = _two_chain_structure()
        s.retain_residues(lambda chain_id, r: r.name != "HOH")
        assert s.chain("B").is_empty()
        s.prune_empty_chains()
        assert s.chain_ids == ["A"]

    def test_centers(self):
        s = Structure()
        c = Chain("A")
        c.add_residue(Residue.with_atoms(1, "XXX", [
            Atom("C1", Element.C, Point(0, 0, 0)),
            Atom("O1", Element.O, Point(2, 0, 0)),
        ], category=ResidueCategory.HETERO))
        s.add_chain(c)
        assert s.geometric_center() == Point(1.0, 0.0, 0.0)
        com = s.center_of_mass()
        expected = 2 * 15.999 / (12.011 + 15.999)
        assert com.x == pytest.approx(expected)

    def test_empty_centers(self):
        assert Structure().geometric_center() == Point.origin()
        assert Structure().coordinates().shape == (0, 3)


# -- Templates ---------------------------------------------------------------


class TestTemplate:
    def test_construct(self):
        t = Template("LIG", ["C1", "C2", "O1"], [("C1", "C2", "single"), ("C2", "O1", BondOrder.DOUBLE)])
        assert t.atom_count == 3
        assert t.bond_count == 2
        assert t.bonds[0][2] is BondOrder.SINGLE
        assert t.has_bond("O1", "C2")
        assert not t.has_bond("C1", "O1")

    def test_undeclared_atom_rejected(self):
        with pytest.raises(TemplateError, match="undeclared"):
            Template("LIG", ["C1"], [("C1", "C2", "single")])

    def test_duplicate_atom_rejected(self):
        with pytest.raises(TemplateError):
            Template("LIG", ["C1", "C1"], [])

    def test_dict_roundtrip(self):
        t = Template.from_dict({"name": "LIG", "atoms": ["A", "B"], "bonds": [["A", "B"]]})
        assert t.bonds == (("A", "B", BondOrder.SINGLE),)
        assert Template.from_dict(t.to_dict()) == t

    def test_from_dict_missing_key(self):
        with pytest.raises(TemplateError, match="missing key"):
            Template.from_dict({"atoms": []})


# -- Bonds and topology ------------------------------------------------------


class TestBond:
    def test_canonical(self):
        b = Bond.new(7, 3, BondOrder.DOUBLE)
        assert (b.a1_idx, b.a2_idx) == (3, 7)
        assert b == Bond(3, 7, BondOrder.DOUBLE)
        assert hash(Bond(5, 1)) == hash(Bond(1, 5))

    def test_other(self):
        b = Bond(2, 9)
        assert b.other(2) == 9
        assert b.other(9) == 2
        assert b.contains(9)
        with pytest.raises(ValueError):
            b.other(4)


class TestTopology:
    def test_index_out_of_range(self):
        s = _two_chain_structure()
        with pytest.raises(ValueError):
            Topology(s, [Bond(0, 6)])

    def test_queries(self):
        s = _two_chain_structure()
        t = Topology(s, [Bond(0, 1), Bond(1, 2), Bond(2, 3)])
        assert t.bond_count == 3
        assert t.atom_count == 6
        assert sorted(t.neighbors_of(1)) == [0, 2]
        assert Bond(1, 0) in t.bond_set()

    def test_to_frame(self):
        s = _two_chain_structure()
        df = Topology(s, [Bond(2, 3)]).to_frame()
        assert isinstance(df, pd.DataFrame)
        row = df.iloc[0]
        assert row["atom1"] == "C"
        assert row["res_name2"] == "GLY"
        assert row["distance"] == pytest.approx(1.0)
        assert row["order"] == "single"

    def test_to_frame_empty(self):
        df = Topology(_two_chain_structure(), []).to_frame()
        assert len(df) == 0
        assert "a1_idx" in df.columns

    def test_save_bonds_csv(self, tmp_path: Path):
        path = tmp_path / "bonds.csv"
        Topology(_two_chain_structure(), [Bond(0, 1)]).save_bonds(path)
        df = pd.read_csv(path)
        assert df["a2_idx"].tolist() == [1]

    def test_save_bonds_parquet(self, tmp_path: Path):
        path = tmp_path / "out" / "bonds.parquet"
        Topology(_two_chain_structure(), [Bond(0, 1), Bond(3, 4)]).save_bonds(path)
        df = pd.read_parquet(path)
        assert len(df) == 2
