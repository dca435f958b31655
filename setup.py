from __future__ import annotations

from setuptools import find_namespace_packages, setup


setup(
    name="webpub",
    version="0.1.0",
    description="Build a wasm artifact with cargo and publish it as the single commit of a git branch",
    python_requires=">=3.10",
    packages=find_namespace_packages(include=["webpub", "webpub.*"]),
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "jsonschema>=4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "webpub=webpub.cli.main:main",
        ],
    },
)
