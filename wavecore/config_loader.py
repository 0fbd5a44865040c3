"""
YAML configuration loader for wave analysis.

Loads analysis configurations from YAML files, allowing parameters to be
tuned without code changes.
"""
import yaml
from pathlib import Path
from typing import Union

from .config import AnalysisConfig
from .shared.defaults import *


def load_config_from_yaml(yaml_path: Union[str, Path]) -> AnalysisConfig:
    """
    Load analysis configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        AnalysisConfig object

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty or contains invalid values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty config file: {yaml_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file must contain a mapping: {yaml_path}")

    pivots = config_dict.get('pivots') or {}
    labeling = config_dict.get('labeling') or {}
    fibonacci = config_dict.get('fibonacci') or {}
    patterns = config_dict.get('patterns') or {}

    return AnalysisConfig(
        name=config_dict.get('name', yaml_path.stem),
        description=config_dict.get('description', ''),

        pivot_window=pivots.get('window', PIVOT_WINDOW),

        progress_interval=labeling.get('progress_interval', PROGRESS_INTERVAL),

        retracement_ratios=tuple(fibonacci.get('retracement_ratios', RETRACEMENT_RATIOS)),
        extension_ratios=tuple(fibonacci.get('extension_ratios', EXTENSION_RATIOS)),
        critical_retracement=fibonacci.get('critical_retracement', CRITICAL_RETRACEMENT),
        critical_extension=fibonacci.get('critical_extension', CRITICAL_EXTENSION),

        impulse_min_waves=patterns.get('impulse_min_waves', IMPULSE_PATTERN_MIN_WAVES),
        corrective_min_waves=patterns.get('corrective_min_waves', CORRECTIVE_PATTERN_MIN_WAVES),
    )
