#!/usr/bin/env python3
"""Setup script for conceptour."""

from setuptools import setup, find_packages

setup(
    name="conceptour",
    version="1.0.0",
    description="Guided tours through concept graphs, with a reorderable outline",
    author="conceptour Project",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "conceptour": ["theme.css"],
    },
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[],
    extras_require={
        "gui": [
            "PyGObject>=3.46.0",
            "pycairo>=1.25.0",
        ],
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "conceptour=conceptour.launcher:main",
        ],
        "gui_scripts": [
            "conceptour-gui=conceptour.launcher:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: X11 Applications :: GTK",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
)
