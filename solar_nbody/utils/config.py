"""Configuration management."""

import json
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from solar_nbody.errors import InvalidParameterError
from solar_nbody.physics.constants import DT_DEFAULT, EPSILON_DEFAULT, G_AU3_PER_KG_DAY2, UNIT_SYSTEM


@dataclass
class SimulationConfig:
    """Simulation configuration.

    The defaults use AU, days and kg. Any other internally consistent unit
    system works as long as ``G`` and ``epsilon`` are expressed in it.
    """
    # Physical constants
    G: float = G_AU3_PER_KG_DAY2
    epsilon: float = EPSILON_DEFAULT
    units: str = UNIT_SYSTEM

    # Stepping
    method: str = "rk4"
    dt: float = DT_DEFAULT

    # Compute
    force_method: str = "vectorized"
    backend: str = "numpy"

    # Diagnostics output
    verbose: bool = False
    debug_interval: int = 100

    def validate(self) -> "SimulationConfig":
        """Check the configuration, raising ``InvalidParameterError`` on bad values."""
        from solar_nbody.physics.force_model import FORCE_METHODS
        from solar_nbody.physics.integrators import check_timestep, resolve_method

        for name in ("G", "epsilon"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidParameterError(f"{name} must be a real number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise InvalidParameterError(f"{name} must be positive and finite, got {value!r}")
        check_timestep(self.dt)
        resolve_method(self.method)
        if self.force_method not in FORCE_METHODS:
            raise InvalidParameterError(
                f"Unknown force method '{self.force_method}'. Available: {list(FORCE_METHODS)}"
            )
        if int(self.debug_interval) < 1:
            raise InvalidParameterError(f"debug_interval must be >= 1, got {self.debug_interval}")
        return self


def load_config(config_path: str) -> SimulationConfig:
    """Load configuration from file.

    Args:
        config_path: Path to config file (.json or .yaml)

    Returns:
        Validated SimulationConfig

    Raises:
        InvalidParameterError: On unknown keys or invalid values
    """
    config_path = Path(config_path)

    with open(config_path, 'r') as f:
        if config_path.suffix in ('.yaml', '.yml'):
            try:
                import yaml
            except ImportError:
                raise ImportError("YAML support requires PyYAML. Install with: pip install pyyaml")
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)

    known = {field.name for field in fields(SimulationConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise InvalidParameterError(f"Unknown configuration keys: {unknown}")

    return SimulationConfig(**data).validate()


def save_config(config: SimulationConfig, output_path: str):
    """Save configuration to file.

    Args:
        config: SimulationConfig object
        output_path: Output file path (.json or .yaml)
    """
    output_path = Path(output_path)
    data = asdict(config)

    with open(output_path, 'w') as f:
        if output_path.suffix in ('.yaml', '.yml'):
            try:
                import yaml
            except ImportError:
                raise ImportError("YAML support requires PyYAML. Install with: pip install pyyaml")
            yaml.dump(data, f, default_flow_style=False)
        else:
            json.dump(data, f, indent=2)
