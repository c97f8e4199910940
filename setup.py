#!/usr/bin/env python

"""
Setup espa_convert
"""
import re
from pathlib import Path
from setuptools import setup, find_packages

HERE = Path(__file__).parent

README = (HERE / "README.md").read_text()

with (HERE / "requirements.txt").open() as requirement_file:
    requirements = [r.strip() for r in requirement_file.readlines() if r.strip()]

VERSION = re.search(
    r'^__version__ = "([^"]+)"', (HERE / "espa_convert" / "__init__.py").read_text(), re.M
).group(1)

test_requirements = [
    "pytest",
    "pytest-cov",
]

setup(
    author="The espa_convert authors",
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    description="Conversion of ESPA raw binary products into legacy HDF4 and GeoTIFF outputs",
    entry_points={
        "console_scripts": [
            "convert_espa_to_hdf=espa_convert.scripts.convert_espa:convert_to_hdf",
            "convert_espa_to_gtif=espa_convert.scripts.convert_espa:convert_to_gtif",
        ],
    },
    install_requires=requirements,
    extras_require={"test": test_requirements},
    long_description=README,
    long_description_content_type="text/markdown",
    include_package_data=True,
    keywords="espa landsat hdf4 geotiff",
    name="espa_convert",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"": ["*.yaml", "logging.cfg"]},
    test_suite="tests",
    tests_require=test_requirements,
    version=VERSION,
)
