"""
Catalog of authored simulations, loaded from JSON files.

Simulations are content, not code. Each one lives in its own
`{simulation_id}.json` file so authors can edit decisions and effects
without touching Python. The catalog directory also holds `_catalog.json`,
which fixes the order simulations are listed in:

```json
{"simulations": ["macroeconomic-policy", "microecon-cafe", ...]}
```

Simulation file structure (camelCase, as persisted):
```json
{
  "id": "microecon-cafe",
  "title": "...",
  "initialState": {"coffeePrice": 4, ...},
  "metrics": [{"key": "coffeePrice", "format": "currency", "min": 1, "max": 10}],
  "steps": [
    {"id": "period2_minimum_wage", "event": "...",
     "externalEffects": {"wage": 3},
     "decisions": [{"id": "absorb_cost", "text": "...", "effects": {"dailyProfit": -80}}]}
  ],
  "resultsConfig": {"chartMetrics": [...], "summaryMetrics": [...]}
}
```

Usage:
    simulation = get_simulation("microecon-cafe")
    if simulation is None:
        ...  # render "not found"
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Config
from .logging_utils import log_info, log_warning
from .schemas import Simulation

MANIFEST_NAME = "_catalog.json"


class CatalogLoader:
    """Load and validate simulations from a directory of JSON files.

    Validation:
    - Required fields: id, title, description, initialState, steps
    - The file name must match the simulation id
    - Pydantic validation covers types, duplicate step ids and decision ids
    - Effect keys without a metric definition are reported as authoring
      warnings (the engine accepts them, but they are usually typos)
    """

    def __init__(self, catalog_dir: Optional[Path] = None):
        """Initialize catalog loader.

        Args:
            catalog_dir: Directory containing simulation files.
                         Defaults to Config.CATALOG_DIR (the packaged catalog)
        """
        self.catalog_dir = Path(catalog_dir) if catalog_dir is not None else Config.CATALOG_DIR

    def load(self, simulation_id: str) -> Simulation:
        """Load one simulation by id.

        Args:
            simulation_id: Simulation id (file name without .json)

        Returns:
            Validated Simulation

        Raises:
            FileNotFoundError: If no file exists for the id
            ValueError: If required fields are missing or the id does not
                match the file name
            pydantic.ValidationError: If the content fails schema validation
        """
        path = self.catalog_dir / f"{simulation_id}.json"
        if not path.exists():
            raise FileNotFoundError(
                f"Simulation '{simulation_id}' not found at {path}"
            )

        data = json.loads(path.read_text("utf-8"))
        self._validate_simulation(data, simulation_id)

        simulation = Simulation.model_validate(data)

        undeclared = simulation.undeclared_effect_keys()
        if undeclared:
            log_warning(
                f"Simulation '{simulation.id}' has effects on undeclared metrics: "
                f"{sorted(undeclared)}"
            )
        return simulation

    def load_all(self) -> List[Simulation]:
        """Load every simulation in catalog order."""
        return [self.load(simulation_id) for simulation_id in self.list_simulations()]

    def list_simulations(self) -> List[str]:
        """List simulation ids: manifest order first, then any others by name.

        Files starting with "_" are not simulations.
        """
        if not self.catalog_dir.exists():
            return []

        available = sorted(
            f.stem for f in self.catalog_dir.glob("*.json")
            if not f.name.startswith("_")
        )

        ordered: List[str] = []
        for simulation_id in self._manifest_order():
            if simulation_id in available and simulation_id not in ordered:
                ordered.append(simulation_id)
            elif simulation_id not in available:
                log_warning(f"Catalog manifest lists missing simulation '{simulation_id}'")

        ordered.extend(sid for sid in available if sid not in ordered)
        return ordered

    def get_simulation_info(self, simulation_id: str) -> Dict[str, Any]:
        """Get catalog-card metadata without validating the full simulation.

        Args:
            simulation_id: Simulation id

        Returns:
            Dict with title, description, tags, time estimate and step count
        """
        path = self.catalog_dir / f"{simulation_id}.json"
        data = json.loads(path.read_text("utf-8"))

        return {
            "id": data.get("id", simulation_id),
            "title": data.get("title", simulation_id),
            "description": data.get("description", "No description"),
            "tags": data.get("tags", []),
            "time_estimate": data.get("timeEstimate", ""),
            "num_steps": len(data.get("steps", [])),
        }

    def _manifest_order(self) -> List[str]:
        manifest = self.catalog_dir / MANIFEST_NAME
        if not manifest.exists():
            return []
        data = json.loads(manifest.read_text("utf-8"))
        return list(data.get("simulations", []))

    def _validate_simulation(self, data: Dict, simulation_id: str) -> None:
        """Validate simulation data has required fields.

        Raises:
            ValueError: If required fields are missing or ids disagree
        """
        required = ["id", "title", "description", "initialState", "steps"]
        missing = [field for field in required if field not in data]

        if missing:
            raise ValueError(
                f"Simulation '{simulation_id}' missing required fields: {missing}"
            )

        if data["id"] != simulation_id:
            raise ValueError(
                f"Simulation file '{simulation_id}.json' declares id '{data['id']}'"
            )


@lru_cache(maxsize=1)
def _default_catalog() -> Dict[str, Simulation]:
    loader = CatalogLoader()
    simulations = {simulation.id: simulation for simulation in loader.load_all()}
    log_info(f"Loaded {len(simulations)} simulations from {loader.catalog_dir}")
    return simulations


# Lookups hand out deep copies; the cached registry itself is never exposed.

def all_simulations() -> List[Simulation]:
    """All packaged simulations, in catalog order."""
    return [simulation.model_copy(deep=True) for simulation in _default_catalog().values()]


def simulation_by_id() -> Dict[str, Simulation]:
    """Mapping of simulation id -> Simulation (copies of the registry)."""
    return {
        simulation_id: simulation.model_copy(deep=True)
        for simulation_id, simulation in _default_catalog().items()
    }


def get_simulation(simulation_id: str) -> Optional[Simulation]:
    """Look up a packaged simulation; None when the id is unknown."""
    simulation = _default_catalog().get(simulation_id)
    if simulation is None:
        return None
    return simulation.model_copy(deep=True)
