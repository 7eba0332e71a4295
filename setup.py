#!/usr/bin/env python3
"""
Setup script for the Codon Bias Analysis package.
"""

from setuptools import setup, find_packages
import os

# Read README file
def read_readme():
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    if os.path.exists(readme_path):
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    return ""

setup(
    name="codon-bias",
    version="1.0.0",
    author="Codon Bias Analysis",
    author_email="codon-bias@example.com",
    description="Codon usage indices and usage tables for protein coding sequences",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    url="https://github.com/example/codon-bias",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
    ],
    python_requires=">=3.8",
    install_requires=[
        "biopython>=1.79",
        "numpy>=1.21",
        "pandas>=1.3",
        "click>=8.0",
        "pyyaml>=5.4",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "codon-bias=codon_bias.cli:cli",
        ],
    },
    include_package_data=True,
    package_data={
        "codon_bias": ["data/*"],
    },
    zip_safe=False,
)
