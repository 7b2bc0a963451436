"""BLB Quant Lab.

Bag of Little Bootstraps (BLB) para correlação ponderada. O código-fonte vive
em `src/blb_quant/` e é consumido principalmente via:

- CLI: `blb-quant run --config configs/blb_default.yaml`
- API: `blb_quant.pipeline.run_blb(...)`
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:  # pragma: no cover - depende de instalação do pacote
    __version__ = version("blb-quant-lab")
except PackageNotFoundError:  # pragma: no cover - fallback para ambiente sem install
    __version__ = "0.0.0"

__all__ = ["__version__"]
