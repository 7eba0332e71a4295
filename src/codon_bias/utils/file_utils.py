"""
File utilities module for writing and reading result tables.
"""

import os
from typing import Optional
import pandas as pd
import logging

logger = logging.getLogger(__name__)

EXTENSION_BY_SEPARATOR = {'\t': 'tsv', ',': 'csv'}


def ensure_directory(directory: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        directory: Directory path to create
    """
    if not directory:
        return
    if not os.path.exists(directory):
        logger.info(f"Creating directory: {directory}")
        os.makedirs(directory, exist_ok=True)
    else:
        logger.debug(f"Directory already exists: {directory}")


def table_extension(separator: str) -> str:
    """File extension for a table written with ``separator``."""
    return EXTENSION_BY_SEPARATOR.get(separator, 'txt')


def save_dataframe(df: pd.DataFrame,
                   output_path: str,
                   separator: str = '\t',
                   **kwargs) -> None:
    """
    Save DataFrame as a delimited text table.

    Args:
        df: DataFrame to save
        output_path: Output file path
        separator: Field separator
        **kwargs: Additional arguments for DataFrame.to_csv
    """
    logger.info(f"Saving DataFrame to {output_path}")

    ensure_directory(os.path.dirname(output_path))

    try:
        df.to_csv(output_path, sep=separator, index=False, **kwargs)
        logger.info(f"DataFrame saved successfully: {len(df)} rows")

    except Exception as e:
        logger.error(f"Error saving DataFrame: {e}")
        raise


def load_dataframe(file_path: str,
                   separator: Optional[str] = None,
                   **kwargs) -> pd.DataFrame:
    """
    Load a delimited table, choosing the separator from the extension if
    not given.

    Args:
        file_path: Path to input file
        separator: Field separator
        **kwargs: Additional arguments for pandas.read_csv

    Returns:
        Loaded DataFrame
    """
    logger.info(f"Loading DataFrame from {file_path}")

    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    if separator is None:
        _, ext = os.path.splitext(file_path)
        separator = ',' if ext.lower() == '.csv' else '\t'

    try:
        # keep formatted values such as '*****' and '0.100' as written
        df = pd.read_csv(file_path, sep=separator, dtype=str, keep_default_na=False, **kwargs)
        logger.info(f"DataFrame loaded successfully: {len(df)} rows, {len(df.columns)} columns")
        return df

    except Exception as e:
        logger.error(f"Error loading DataFrame: {e}")
        raise
