"""
Configuration loader utility module.
"""

import os
import yaml
from typing import Dict, Any, List, Optional
import logging

logger = logging.getLogger(__name__)

# Per-sequence indices reported as columns of the index table
INDEX_CHOICES = ['cai', 'fop', 'cbi', 'enc', 'gc3s', 'gc', 'l_sym', 'l_aa',
                 'hydropathy', 'aromaticity']

# Tables written as separate files
TABLE_CHOICES = ['codon_usage', 'rscu', 'raau', 'aa_usage', 'silent_base',
                 'dinucleotides', 'base_composition']

NUM_GENETIC_CODES = 8

PATH_KEYS = ['cai_file', 'fop_file', 'cbi_file', 'reference_data', 'output_dir']


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Missing keys are filled from the default configuration.

    Args:
        config_path: Path to configuration file

    Returns:
        Dictionary with configuration data
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError("Configuration must be a mapping")

        config = merge_configs(get_default_config(), config)

        logger.info("Configuration loaded successfully")
        return config

    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML configuration: {e}")
        raise
    except Exception as e:
        logger.error(f"Error loading configuration: {e}")
        raise


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Raises:
        ValueError: If configuration is invalid
    """
    logger.info("Validating configuration")

    required_keys = ['genetic_code', 'indices', 'separator', 'output_dir']
    for key in required_keys:
        if key not in config:
            raise ValueError(f"Missing required configuration key: {key}")

    code = config['genetic_code']
    if isinstance(code, bool) or not isinstance(code, int) or not 0 <= code < NUM_GENETIC_CODES:
        raise ValueError(f"genetic_code must be an integer between 0 and {NUM_GENETIC_CODES - 1}")

    for key, choices in (('indices', INDEX_CHOICES), ('tables', TABLE_CHOICES)):
        values = config.get(key, [])
        if not isinstance(values, list):
            raise ValueError(f"{key} must be a list")
        for value in values:
            if value not in choices:
                raise ValueError(f"Invalid {key} entry '{value}', choose from {choices}")

    separator = config['separator']
    if not isinstance(separator, str) or len(separator) != 1:
        raise ValueError("separator must be a single character")

    for key in ('cai_species', 'fop_species'):
        if key in config and not isinstance(config[key], str):
            raise ValueError(f"{key} must be a string")

    for key in ('modified_fop', 'totals', 'warn'):
        if key in config and not isinstance(config[key], bool):
            raise ValueError(f"{key} must be true or false")

    for key in ('cai_file', 'fop_file', 'cbi_file', 'reference_data'):
        value = config.get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"{key} must be a file path")

    logger.info("Configuration validation passed")


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration template.

    Returns:
        Dictionary with default configuration
    """
    return {
        'genetic_code': 0,
        'cai_species': 'ecoli',
        'fop_species': 'ecoli',
        'cai_file': None,
        'fop_file': None,
        'cbi_file': None,
        'reference_data': None,
        'modified_fop': False,
        'indices': ['cai', 'fop', 'cbi', 'enc', 'gc3s', 'gc', 'l_sym', 'l_aa'],
        'tables': ['codon_usage'],
        'separator': '\t',
        'totals': False,
        'warn': True,
        'output_dir': 'results'
    }


def save_config(config: Dict[str, Any], output_path: str) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration dictionary
        output_path: Path to save configuration
    """
    logger.info(f"Saving configuration to {output_path}")

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    try:
        with open(output_path, 'w') as f:
            yaml.dump(config, f, default_flow_style=False, indent=2)

        logger.info("Configuration saved successfully")

    except Exception as e:
        logger.error(f"Error saving configuration: {e}")
        raise


def merge_configs(base_config: Dict[str, Any],
                  override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two configuration dictionaries.

    Args:
        base_config: Base configuration
        override_config: Override configuration; None values are skipped

    Returns:
        Merged configuration dictionary
    """
    logger.debug("Merging configurations")

    merged = base_config.copy()
    for key, value in override_config.items():
        if value is None and key in merged:
            continue
        merged[key] = value

    validate_config(merged)

    return merged


def expand_paths(config: Dict[str, Any], base_dir: str = '.') -> Dict[str, Any]:
    """
    Expand relative paths in configuration to absolute paths.

    Args:
        config: Configuration dictionary
        base_dir: Base directory for relative paths

    Returns:
        Configuration with expanded paths
    """
    logger.debug("Expanding configuration paths")

    expanded = config.copy()
    for key in PATH_KEYS:
        if expanded.get(key):
            expanded[key] = os.path.abspath(os.path.join(base_dir, expanded[key]))

    return expanded


def create_example_config(output_path: str) -> None:
    """
    Create an example configuration file.

    Args:
        output_path: Path to save example configuration
    """
    logger.info(f"Creating example configuration at {output_path}")

    example_config = get_default_config()
    save_config(example_config, output_path)

    logger.info("Example configuration created successfully")


def validate_file_paths(config: Dict[str, Any]) -> List[str]:
    """
    Validate that the reference files named in the configuration exist.

    Args:
        config: Configuration dictionary

    Returns:
        List of missing file paths
    """
    missing_paths = []

    for key in ('cai_file', 'fop_file', 'cbi_file', 'reference_data'):
        path: Optional[str] = config.get(key)
        if path and not os.path.exists(path):
            missing_paths.append(path)

    if missing_paths:
        logger.warning(f"Missing file paths: {missing_paths}")
    else:
        logger.info("All file paths validated successfully")

    return missing_paths
