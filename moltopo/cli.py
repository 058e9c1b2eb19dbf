from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from moltopo.config import load_settings
from moltopo.core.errors import MoltopoError
from moltopo.core.logging_utils import get_logger
from moltopo.model.structure import Structure
from moltopo.ops.clean import CleanConfig, clean_structure
from moltopo.ops.topology import TopologyBuilder
from moltopo.parsers.mol2 import load_templates
from moltopo.parsers.registry import read_structure
from moltopo.templates.registry import default_registry
from moltopo.writers import save_structure

logger = get_logger(__name__)
app = typer.Typer(no_args_is_help=True)


def _fail(err: Exception) -> None:
    typer.secho(f"Error: {err}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _read(path: Path) -> Structure:
    try:
        return read_structure(path)
    except ValueError as e:
        if isinstance(e, MoltopoError):
            raise
        raise typer.BadParameter(str(e), param_hint="INPUT") from e


@app.command("topology")
def topology(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Input structure (.pdb/.cif)."),
    out: Path = typer.Option(..., help="Output structure with bonds (.pdb -> CONECT, .cif -> _struct_conn)."),
    template: Optional[List[Path]] = typer.Option(
        None, help="User template file or directory (.mol2/.json); repeatable.",
    ),
    disulfide_cutoff: Optional[float] = typer.Option(None, help="SG-SG cutoff in Angstrom (default 2.2)."),
    peptide_cutoff: Optional[float] = typer.Option(None, help="C-N cutoff in Angstrom (default 1.5)."),
    nucleic_cutoff: Optional[float] = typer.Option(None, help="O3'-P cutoff in Angstrom (default 1.8)."),
    bonds_table: Optional[Path] = typer.Option(None, help="Also write the bond table (.parquet or .csv)."),
):
    """Infer bonds for a structure and write it with connectivity."""
    settings = load_settings()
    template_paths = list(template or [])
    if settings.template_path is not None:
        template_paths.append(settings.template_path)

    try:
        builder = TopologyBuilder.from_settings(settings)
        if disulfide_cutoff is not None:
            builder.disulfide_cutoff(disulfide_cutoff)
        if peptide_cutoff is not None:
            builder.peptide_cutoff(peptide_cutoff)
        if nucleic_cutoff is not None:
            builder.nucleic_cutoff(nucleic_cutoff)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    try:
        builder.add_templates(load_templates(template_paths))
        structure = _read(input_path)
        topo = builder.build(structure)
        save_structure(topo, out)
        if bonds_table is not None:
            topo.save_bonds(bonds_table)
            logger.info("Wrote bond table to %s", bonds_table)
    except MoltopoError as e:
        _fail(e)

    logger.info("Wrote %s (atoms=%d bonds=%d)", out, topo.atom_count, topo.bond_count)


@app.command("clean")
def clean(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Input structure (.pdb/.cif)."),
    out: Path = typer.Option(..., help="Output structure (.pdb/.cif)."),
    water: bool = typer.Option(False, help="Remove water."),
    ions: bool = typer.Option(False, help="Remove ions."),
    hydrogens: bool = typer.Option(False, help="Strip hydrogens."),
    hetero: bool = typer.Option(False, help="Remove hetero residues."),
    remove: Optional[List[str]] = typer.Option(None, help="Residue name to remove; repeatable."),
    keep: Optional[List[str]] = typer.Option(None, help="Residue name to always keep; repeatable."),
):
    """Strip water / ions / hydrogens / hetero residues from a structure."""
    config = CleanConfig(
        remove_water=water,
        remove_ions=ions,
        remove_hydrogens=hydrogens,
        remove_hetero=hetero,
        remove_residue_names=set(remove or []),
        keep_residue_names=set(keep or []),
    )
    try:
        structure = clean_structure(_read(input_path), config)
        save_structure(structure, out)
    except MoltopoError as e:
        _fail(e)
    logger.info("Wrote %s (residues=%d atoms=%d)", out, structure.residue_count, structure.atom_count)


@app.command("templates")
def templates(
    aliases: bool = typer.Option(False, help="Also list alias names."),
):
    """List the built-in residue templates."""
    registry = default_registry()
    for name in registry.names():
        tmpl = registry.get(name)
        typer.echo(f"{name}\t{tmpl.standard_name.value}\t{len(tmpl.heavy_atoms)} heavy\t{tmpl.bond_count} bonds")
    if aliases:
        for alias, target in sorted(registry.aliases.items()):
            typer.echo(f"{alias}\t-> {target}")
