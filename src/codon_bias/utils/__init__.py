"""
Utility modules for configuration loading and file operations.
"""

from .config_loader import load_config, validate_config, get_default_config
from .file_utils import ensure_directory, save_dataframe, load_dataframe
