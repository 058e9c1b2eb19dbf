from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_env_path = Path(__file__).resolve().parents[1] / ".env"
if _env_path.is_file():
    load_dotenv(_env_path, override=False)


@dataclass
class MoltopoSettings:
    """Configuration loaded from MOLTOPO_* environment variables.

    Topology cutoffs (Angstrom):
      MOLTOPO_DISULFIDE_CUTOFF=2.2
      MOLTOPO_PEPTIDE_CUTOFF=1.5
      MOLTOPO_NUCLEIC_CUTOFF=1.8

    Misc:
      MOLTOPO_LOG_LEVEL=INFO
      MOLTOPO_TEMPLATE_DIR=/path/to/hetero/templates
    """

    disulfide_cutoff: float = 2.2
    peptide_cutoff: float = 1.5
    nucleic_cutoff: float = 1.8

    log_level: str = "INFO"

    # Directory scanned for user hetero templates (.mol2 / .json)
    template_dir: Optional[str] = None

    @property
    def template_path(self) -> Optional[Path]:
        return Path(self.template_dir) if self.template_dir else None


def load_settings() -> MoltopoSettings:
    """Load settings from environment variables."""
    return MoltopoSettings(
        disulfide_cutoff=float(os.environ.get("MOLTOPO_DISULFIDE_CUTOFF", "2.2")),
        peptide_cutoff=float(os.environ.get("MOLTOPO_PEPTIDE_CUTOFF", "1.5")),
        nucleic_cutoff=float(os.environ.get("MOLTOPO_NUCLEIC_CUTOFF", "1.8")),
        log_level=os.environ.get("MOLTOPO_LOG_LEVEL", "INFO").upper(),
        template_dir=os.environ.get("MOLTOPO_TEMPLATE_DIR") or None,
    )
