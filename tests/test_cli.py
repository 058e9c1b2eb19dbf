"""Tests for the moltopo command line."""

import json
from pathlib import Path

import pandas as pd
import pytest
from typer.testing import CliRunner

from moltopo.cli import app
from moltopo.model.atom import Atom
from moltopo.model.chain import Chain
from moltopo.model.geometry import Point
from moltopo.model.residue import Residue
from moltopo.model.structure import Structure
from moltopo.model.types import Element, ResidueCategory
from moltopo.parsers import read_structure
from moltopo.writers import save_structure

runner = CliRunner()


def _res(res_id, name, atoms, category=ResidueCategory.STANDARD):
    return Residue.with_atoms(
        res_id, name,
        [Atom(n, Element.guess(n), Point(*xyz)) for n, xyz in atoms],
        category=category,
    )


@pytest.fixture(autouse=True)
def _no_env_templates(monkeypatch):
    monkeypatch.delenv("MOLTOPO_TEMPLATE_DIR", raising=False)


@pytest.fixture
def input_pdb(tmp_path: Path) -> Path:
    a = Chain("A")
    a.add_residue(_res(1, "ALA", [
        ("N", (0.0, 0.0, 0.0)), ("CA", (1.46, 0.0, 0.0)), ("C", (2.0, 1.4, 0.0)),
        ("O", (1.2, 2.4, 0.0)), ("CB", (2.0, -0.8, -1.2)),
    ]))
    a.add_residue(_res(2, "GLY", [
        ("N", (3.33, 1.4, 0.0)), ("CA", (4.0, 2.7, 0.0)), ("C", (5.5, 2.6, 0.0)),
        ("O", (6.1, 1.5, 0.0)), ("OXT", (6.1, 3.7, 0.0)),
    ]))
    a.add_residue(_res(101, "HOH", [("O", (10.0, 10.0, 10.0))], ResidueCategory.WATER))
    b = Chain("B")
    b.add_residue(_res(301, "LIG", [("C1", (20.0, 20.0, 20.0)), ("O1", (21.2, 20.0, 20.0))],
                       ResidueCategory.HETERO))
    path = tmp_path / "in.pdb"
    save_structure(Structure(chains=[a, b]), path)
    return path


@pytest.fixture
def lig_json(tmp_path: Path) -> Path:
    path = tmp_path / "lig.json"
    path.write_text(json.dumps({"name": "LIG", "atoms": ["C1", "O1"], "bonds": [["C1", "O1", "double"]]}))
    return path


# -- topology command tests ----------------------------------------------------


class TestTopologyCommand:
    def test_writes_conect(self, tmp_path, input_pdb, lig_json):
        out = tmp_path / "out.pdb"
        result = runner.invoke(app, ["topology", str(input_pdb), "--out", str(out), "--template", str(lig_json)])
        assert result.exit_code == 0, result.output
        conect = [l for l in out.read_text().splitlines() if l.startswith("CONECT")]
        assert conect
        assert read_structure(out).atom_count == 13

    def test_writes_mmcif_and_bond_table(self, tmp_path, input_pdb, lig_json):
        out = tmp_path / "out.cif"
        table = tmp_path / "bonds.csv"
        result = runner.invoke(app, [
            "topology", str(input_pdb), "--out", str(out),
            "--template", str(lig_json), "--bonds-table", str(table),
        ])
        assert result.exit_code == 0, result.output
        assert "_struct_conn" in out.read_text()
        df = pd.read_csv(table)
        assert len(df) == 10
        assert ((df["atom1"] == "C") & (df["atom2"] == "N")).any()

    def test_template_directory(self, tmp_path, input_pdb, lig_json):
        out = tmp_path / "out.pdb"
        result = runner.invoke(app, ["topology", str(input_pdb), "--out", str(out), "--template", str(tmp_path)])
        assert result.exit_code == 0, result.output

    def test_template_dir_from_env(self, tmp_path, input_pdb, lig_json, monkeypatch):
        monkeypatch.setenv("MOLTOPO_TEMPLATE_DIR", str(tmp_path))
        out = tmp_path / "out.pdb"
        result = runner.invoke(app, ["topology", str(input_pdb), "--out", str(out)])
        assert result.exit_code == 0, result.output

    def test_missing_user_template(self, tmp_path, input_pdb):
        out = tmp_path / "out.pdb"
        result = runner.invoke(app, ["topology", str(input_pdb), "--out", str(out)])
        assert result.exit_code == 1
        assert "LIG" in result.output
        assert not out.exists()

    def test_bad_cutoff(self, tmp_path, input_pdb, lig_json):
        result = runner.invoke(app, [
            "topology", str(input_pdb), "--out", str(tmp_path / "o.pdb"),
            "--template", str(lig_json), "--disulfide-cutoff", "0",
        ])
        assert result.exit_code == 2

    def test_unsupported_input(self, tmp_path):
        src = tmp_path / "in.xyz"
        src.write_text("3\n")
        result = runner.invoke(app, ["topology", str(src), "--out", str(tmp_path / "o.pdb")])
        assert result.exit_code == 1
        assert "no parser" in result.output


# -- clean command tests -------------------------------------------------------


class TestCleanCommand:
    def test_remove_water(self, tmp_path, input_pdb):
        out = tmp_path / "clean.pdb"
        result = runner.invoke(app, ["clean", str(input_pdb), "--out", str(out), "--water"])
        assert result.exit_code == 0, result.output
        names = [r.name for r in read_structure(out).iter_residues()]
        assert names == ["ALA", "GLY", "LIG"]

    def test_remove_by_name_and_keep(self, tmp_path, input_pdb):
        out = tmp_path / "clean.pdb"
        result = runner.invoke(app, [
            "clean", str(input_pdb), "--out", str(out),
            "--hetero", "--water", "--keep", "HOH",
        ])
        assert result.exit_code == 0, result.output
        names = [r.name for r in read_structure(out).iter_residues()]
        assert names == ["ALA", "GLY", "HOH"]


# -- templates command tests ---------------------------------------------------


class TestTemplatesCommand:
    def test_lists_templates(self):
        result = runner.invoke(app, ["templates"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert "ALA\tALA\t5 heavy\t4 bonds" in lines
        assert any(l.startswith("CYX\tCYS\t") for l in lines)
        assert not any("->" in l for l in lines)

    def test_aliases(self):
        result = runner.invoke(app, ["templates", "--aliases"])
        assert result.exit_code == 0
        assert "WAT\t-> HOH" in result.output.splitlines()
