#!/usr/bin/env python3
"""
Setup script for yogurt
"""

from pathlib import Path

from setuptools import find_packages, setup

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    long_description = readme_file.read_text(encoding='utf-8')

# Read version from yogurt/__init__.py
version = "0.1.0"
init_file = Path(__file__).parent / "yogurt" / "__init__.py"
if init_file.exists():
    for line in init_file.read_text(encoding='utf-8').split('\n'):
        if line.startswith('__version__'):
            version = line.split('=')[1].strip().strip('"').strip("'")
            break

BASE_REQUIREMENTS = [
    "pycountry>=23.12.0",
    "requests>=2.31.0",
    "tabulate>=0.9.0",
]

EXTRAS = {}
EXTRAS["dev"] = sorted(
    [
        "pytest>=7.0.0",
        "black>=22.0.0",
        "flake8>=4.0.0",
    ]
)


setup(
    name="yogurt",
    version=version,
    description="Rule-based lexemization and arc-standard dependency parsing",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "yogurt": ["data/*.json"],
    },
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=BASE_REQUIREMENTS,
    extras_require=EXTRAS,
    entry_points={
        "console_scripts": [
            "yogurt=yogurt.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Topic :: Text Processing :: Linguistic",
    ],
    keywords="nlp, tokenization, dependency-parsing, shift-reduce, penn-treebank",
    zip_safe=False,
)
