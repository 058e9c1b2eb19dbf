"""Tests for the built-in residue templates and the template registry."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from moltopo.core.errors import TemplateError
from moltopo.model.types import RESIDUE_ALIASES, BondOrder, ResidueCategory, StandardResidue
from moltopo.parsers.base import classify_residue
from moltopo.templates import HydrogenSpec, ResidueTemplate, TemplateRegistry, default_registry
from moltopo.templates.standard import STANDARD_ALIASES, parse_bonds, parse_hydrogens, standard_aliases


# -- Notation tests ------------------------------------------------------------


class TestBondNotation:
    def test_parse_bonds(self):
        assert parse_bonds("N-CA C=O CG:CD1 C1#N1") == (
            ("N", "CA", BondOrder.SINGLE),
            ("C", "O", BondOrder.DOUBLE),
            ("CG", "CD1", BondOrder.AROMATIC),
            ("C1", "N1", BondOrder.TRIPLE),
        )

    def test_primed_names(self):
        assert parse_bonds("C3'-O3'") == (("C3'", "O3'", BondOrder.SINGLE),)

    def test_bad_token(self):
        with pytest.raises(ValueError, match="separator"):
            parse_bonds("NCA")

    def test_parse_hydrogens(self):
        hs = parse_hydrogens([("CB", "HB2 HB3"), ("N", "H")])
        assert [h.name for h in hs] == ["HB2", "HB3", "H"]
        assert hs[0].anchors == ("CB",)


# -- Template validation tests ---------------------------------------------------


class TestResidueTemplate:
    def test_unknown_bond_atom(self):
        with pytest.raises(TemplateError, match="unknown atom"):
            ResidueTemplate("ALA", StandardResidue.ALA, heavy_atoms=("N", "CA"),
                            bonds=(("N", "CB", BondOrder.SINGLE),))

    def test_unknown_anchor(self):
        with pytest.raises(TemplateError, match="anchored"):
            ResidueTemplate("ALA", StandardResidue.ALA, heavy_atoms=("N",),
                            hydrogens=(HydrogenSpec("HA", ("CA",)),))

    def test_repeated_heavy_atom(self):
        with pytest.raises(TemplateError):
            ResidueTemplate("ALA", StandardResidue.ALA, heavy_atoms=("N", "N"))

    def test_primary_anchor(self):
        assert HydrogenSpec("HX", ("CA", "CB")).primary_anchor == "CA"
        assert HydrogenSpec("HX").primary_anchor is None


class TestTemplateRegistry:
    def _tmpl(self, name):
        return ResidueTemplate(name, StandardResidue.GLY, heavy_atoms=("N", "CA"),
                               bonds=(("N", "CA", BondOrder.SINGLE),))

    def test_lookup_and_alias(self):
        reg = TemplateRegistry([self._tmpl("GLY")], aliases={"GLZ": "GLY"})
        assert reg.get("GLZ") is reg.get("GLY")
        assert "GLZ" in reg
        assert "XYZ" not in reg
        assert reg.get("XYZ") is None
        assert len(reg) == 1

    def test_duplicate_name(self):
        with pytest.raises(TemplateError, match="twice"):
            TemplateRegistry([self._tmpl("GLY"), self._tmpl("GLY")])

    def test_alias_to_unknown(self):
        with pytest.raises(TemplateError, match="unknown template"):
            TemplateRegistry([self._tmpl("GLY")], aliases={"WAT": "HOH"})


# -- Built-in set tests ----------------------------------------------------------


class TestDefaultRegistry:
    def test_same_instance(self):
        assert default_registry() is default_registry()

    def test_same_instance_across_threads(self):
        with ThreadPoolExecutor(max_workers=8) as pool:
            regs = list(pool.map(lambda _: default_registry(), range(16)))
        assert all(r is regs[0] for r in regs)

    def test_covers_every_standard_residue(self):
        reg = default_registry()
        for std in StandardResidue:
            assert std.value in reg

    def test_protonation_variants(self):
        reg = default_registry()
        for name, std in [("HID", "HIS"), ("HIE", "HIS"), ("HIP", "HIS"), ("ASH", "ASP"),
                          ("GLH", "GLU"), ("LYN", "LYS"), ("CYX", "CYS"), ("CYM", "CYS")]:
            assert reg.get(name).standard_name is StandardResidue(std)

    def test_aliases(self):
        reg = default_registry()
        assert reg.get("WAT").name == "HOH"
        assert reg.get("TIP3").name == "HOH"
        assert reg.get("HSE").name == "HIE"
        assert reg.aliases == STANDARD_ALIASES
        assert "DOD" not in reg.aliases

    def test_alias_table_follows_residue_synonyms(self):
        aliases = standard_aliases(["HOH", "HID", "ASH"])
        assert aliases["WAT"] == "HOH"
        assert aliases["HSD"] == "HID"
        assert aliases["HSE"] == "HIS"
        assert "ASH" not in aliases

    @pytest.mark.parametrize(
        "name", sorted(set(RESIDUE_ALIASES) | {std.value for std in StandardResidue}),
    )
    def test_every_classified_name_has_a_template(self, name):
        assert classify_residue(name) in (ResidueCategory.STANDARD, ResidueCategory.WATER)
        tmpl = default_registry().get(name)
        assert tmpl is not None
        assert tmpl.standard_name is StandardResidue.from_name(name)

    def test_charges(self):
        reg = default_registry()
        assert reg.get("LYS").charge == 1
        assert reg.get("HIP").charge == 1
        assert reg.get("ASP").charge == -1
        assert reg.get("ALA").charge == 0
        assert reg.get("DA").charge == -1

    def test_backbone(self):
        reg = default_registry()
        ala = reg.get("ALA")
        assert ala.heavy_atoms == ("N", "CA", "C", "O", "CB")
        assert ("C", "O", BondOrder.DOUBLE) in ala.bonds
        assert ala.hydrogen("H").primary_anchor == "N"
        assert reg.get("PRO").hydrogen("H") is None
        assert ("CD", "N", BondOrder.SINGLE) in reg.get("PRO").bonds

    def test_disulfide_cysteine_has_no_thiol_hydrogen(self):
        reg = default_registry()
        assert reg.get("CYS").hydrogen("HG") is not None
        assert reg.get("CYX").hydrogen("HG") is None
        assert reg.get("CYX").has_atom("SG")

    def test_aromatic_rings(self):
        phe = default_registry().get("PHE")
        aromatic = [b for b in phe.bonds if b[2] is BondOrder.AROMATIC]
        assert len(aromatic) == 6

    def test_nucleotides(self):
        reg = default_registry()
        rna = reg.get("A")
        dna = reg.get("DA")
        assert rna.has_atom("O2'")
        assert not dna.has_atom("O2'")
        assert dna.hydrogen("H2''").primary_anchor == "C2'"
        assert ("C3'", "O3'", BondOrder.SINGLE) in dna.bonds
        assert reg.get("DT").has_atom("C7")

    def test_water(self):
        hoh = default_registry().get("HOH")
        assert hoh.heavy_atoms == ("O",)
        assert hoh.bonds == ()
        assert [h.name for h in hoh.hydrogens] == ["H1", "H2"]

    def test_heavy_water(self):
        dod = default_registry().get("DOD")
        assert dod.standard_name is StandardResidue.HOH
        assert dod.hydrogen("D1").primary_anchor == "O"
        assert [h.name for h in dod.hydrogens] == ["D1", "D2"]

    def test_terminal_atoms_not_in_templates(self):
        for tmpl in default_registry():
            for name in ("OXT", "H1", "H2", "H3", "HXT", "HO5'", "HO3'"):
                if tmpl.standard_name.is_water or (tmpl.standard_name.is_nucleic and name in ("H1", "H2", "H3")):
                    continue
                assert not tmpl.has_atom(name), (tmpl.name, name)
