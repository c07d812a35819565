#!/usr/bin/env python

from setuptools import setup


VERSION = "0.1a1"

setup(
    name="xenpath",
    version=VERSION,
    description="An in-memory markup tree with a compact path query language.",
    license="AGPL-3.0-or-later",
    python_requires=">=3.10",
    packages=[
        "_xenpath",
        "_xenpath.path",
        "_xenpath.plugins",
        "xenpath",
    ],
    install_requires=["lxml"],
    extras_require={
        "test": ["httpx", "pytest", "pytest-httpx"],
        "web-loader": ["httpx"],
    },
)
