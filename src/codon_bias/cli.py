"""
Command-line interface for the codon usage analysis package.
"""

import os
import sys
import logging
from typing import Dict, Optional, Tuple
import click

from .utils.config_loader import (load_config, get_default_config, merge_configs,
                                  expand_paths, INDEX_CHOICES, TABLE_CHOICES)
from .utils.file_utils import ensure_directory, save_dataframe, table_extension
from .parsers.sequence_parser import load_sequences, load_sequence_dir, sequence_summary
from .parsers.reference_parser import ReferenceTableError
from .analysis.genetic_code import GENETIC_CODE_CATALOG
from .analysis.reference_tables import list_builtin_species
from .analysis.session import session_from_config
from .report import analyse_records

logger = logging.getLogger(__name__)

# exit status for malformed reference data
FATAL_EXIT_CODE = 99


@click.command()
@click.argument('input_file', type=click.Path(exists=True))
@click.option('--config',
              type=click.Path(exists=True),
              help='Path to YAML config file')
@click.option('--code', 'genetic_code',
              type=click.IntRange(0, len(GENETIC_CODE_CATALOG) - 1),
              help='Genetic code (see show-codes)')
@click.option('--cai-species', type=str, help='Built-in CAI table')
@click.option('--fop-species', type=str, help='Built-in optimal codon table for Fop and CBI')
@click.option('--cai-file', type=click.Path(exists=True), help='User CAI adaptation values')
@click.option('--fop-file', type=click.Path(exists=True), help='User optimal codons for Fop')
@click.option('--cbi-file', type=click.Path(exists=True), help='User optimal codons for CBI')
@click.option('--reference-data', type=click.Path(exists=True),
              help='YAML file of species reference tables (replaces the built-in set)')
@click.option('--modified-fop', is_flag=True,
              help='Use Fop = (optimal - non-optimal) / total')
@click.option('--index', 'indices', multiple=True,
              type=click.Choice(INDEX_CHOICES),
              help='Index to report (repeatable)')
@click.option('--table', 'tables', multiple=True,
              type=click.Choice(TABLE_CHOICES),
              help='Additional table to write (repeatable)')
@click.option('--separator', type=str, help='Output field separator')
@click.option('--totals', is_flag=True,
              help='Concatenate all sequences into one')
@click.option('--no-warn', is_flag=True, help='Do not report sequence warnings')
@click.option('--outdir', type=click.Path(), help='Output directory (overrides config)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Enable quiet mode (errors only)')
def main(input_file: str,
         config: Optional[str],
         genetic_code: Optional[int],
         cai_species: Optional[str],
         fop_species: Optional[str],
         cai_file: Optional[str],
         fop_file: Optional[str],
         cbi_file: Optional[str],
         reference_data: Optional[str],
         modified_fop: bool,
         indices: Tuple[str, ...],
         tables: Tuple[str, ...],
         separator: Optional[str],
         totals: bool,
         no_warn: bool,
         outdir: Optional[str],
         verbose: bool,
         quiet: bool) -> None:
    """
    Calculate codon usage indices for the sequences in INPUT_FILE (a FASTA,
    EMBL or GenBank file, or a directory of them).
    """
    try:
        if config:
            config_data = expand_paths(load_config(config), os.path.dirname(config))
        else:
            config_data = get_default_config()

        config_data = merge_configs(config_data, {
            'genetic_code': genetic_code,
            'cai_species': cai_species,
            'fop_species': fop_species,
            'cai_file': cai_file,
            'fop_file': fop_file,
            'cbi_file': cbi_file,
            'reference_data': reference_data,
            'modified_fop': True if modified_fop else None,
            'indices': list(indices) or None,
            'tables': list(tables) or None,
            'separator': separator,
            'totals': True if totals else None,
            'warn': False if no_warn else None,
            'output_dir': outdir,
        })

        output_dir = config_data['output_dir']
        _setup_logging(os.path.join(output_dir, 'codon_bias_analysis.log'), verbose, quiet)

    except Exception as e:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.ERROR if quiet else logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        logger.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    logger.info("Starting codon usage analysis")

    try:
        if os.path.isdir(input_file):
            records = load_sequence_dir(input_file)
        else:
            records = load_sequences(input_file)
        if not records:
            logger.error(f"No sequences found in {input_file}")
            sys.exit(1)
        logger.info(f"Sequence summary: {sequence_summary(records)}")

        session = session_from_config(config_data)
        results = analyse_records(records, session,
                                  indices=config_data['indices'],
                                  tables=config_data.get('tables', []))
        _write_results(results, input_file, output_dir, config_data['separator'])

    except ReferenceTableError as e:
        logger.error(f"{e} EXITING")
        sys.exit(FATAL_EXIT_CODE)
    except Exception as e:
        logger.error(f"Analysis failed: {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    logger.info("Codon usage analysis completed successfully")


def _write_results(results: Dict, input_file: str, output_dir: str, separator: str) -> None:
    """Write every result table to the output directory."""
    ensure_directory(output_dir)
    stem = os.path.splitext(os.path.basename(os.path.normpath(input_file)))[0]
    extension = table_extension(separator)

    for name, df in results.items():
        if df.empty:
            logger.warning(f"No rows for {name}, nothing written")
            continue
        output_path = os.path.join(output_dir, f'{stem}_{name}.{extension}')
        save_dataframe(df, output_path, separator=separator)


def _setup_logging(log_file: str, verbose: bool = False, quiet: bool = False) -> None:
    """Set up logging to both console and file."""

    # Clear any existing handlers
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.INFO
    root_logger.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    ensure_directory(os.path.dirname(log_file))
    file_handler = logging.FileHandler(log_file, mode='w')
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    logger.info(f"Logging configured - console and file: {log_file}")


@click.command()
@click.option('--output', '-o',
              type=click.Path(),
              default='config/codon_bias.yaml',
              help='Output path for example configuration')
def create_config(output: str) -> None:
    """Create an example configuration file."""
    from .utils.config_loader import create_example_config

    create_example_config(output)
    click.echo(f"Example configuration written to {output}")


@click.command()
@click.argument('config_path', type=click.Path(exists=True))
def validate_config_cmd(config_path: str) -> None:
    """Validate a configuration file."""
    try:
        config = expand_paths(load_config(config_path), os.path.dirname(config_path))

        from .utils.config_loader import validate_file_paths
        missing_paths = validate_file_paths(config)

        if missing_paths:
            click.echo(f"Missing file paths: {missing_paths}")
            sys.exit(1)
        click.echo("Configuration is valid")

    except Exception as e:
        click.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)


@click.command()
@click.option('--code', 'genetic_code',
              type=click.IntRange(0, len(GENETIC_CODE_CATALOG) - 1),
              help='Print the codon table of this genetic code')
def show_codes(genetic_code: Optional[int]) -> None:
    """List the genetic codes and built-in reference tables."""
    if genetic_code is not None:
        from .analysis.session import AnalysisSession
        from .analysis.genetic_code import load_genetic_code
        from .report import codon_table

        code = load_genetic_code(genetic_code)
        click.echo(f"{code.name} ({code.changes})")
        click.echo(codon_table(AnalysisSession(code)).to_string(index=False))
        return

    click.echo("Genetic codes")
    click.echo("=" * 40)
    for code_id, (name, changes, ncbi_id) in enumerate(GENETIC_CODE_CATALOG):
        click.echo(f"  {code_id}  {name:<50} {changes:<20} (NCBI table {ncbi_id})")

    species = list_builtin_species()
    click.echo()
    click.echo("Built-in CAI tables: " + ", ".join(species['cai']))
    click.echo("Built-in Fop/CBI tables: " + ", ".join(species['fop']))


@click.group()
def cli():
    """Codon usage analysis CLI."""
    pass


cli.add_command(main, name='run')
cli.add_command(create_config, name='create-config')
cli.add_command(validate_config_cmd, name='validate-config')
cli.add_command(show_codes, name='show-codes')


if __name__ == '__main__':
    cli()
