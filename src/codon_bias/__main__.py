"""
Main entry point for ``python -m codon_bias``.
"""

from .cli import cli

if __name__ == '__main__':
    cli()
