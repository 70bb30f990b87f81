"""Build and install the gpmfklv package."""

from setuptools import setup, find_packages

setup(
    name="gpmfklv",
    version="0.1.0",
    description="Decoder for GPMF KLV telemetry metadata",
    python_requires=">=3.9",
    package_dir={"": "python"},
    packages=find_packages("python"),
    install_requires=["numpy"],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["gpmfklv=gpmfklv.cli:main"]},
)
