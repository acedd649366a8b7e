#!/usr/bin/env python3
"""
Setup script for Lockbox
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="lockbox",
    version="0.1.0",
    author="Tyler Zervas",
    author_email="tz-dev@vectorweight.com",
    description="Local encrypted credential vault for the terminal",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security :: Cryptography",
    ],
    python_requires=">=3.11",
    install_requires=[
        "argon2-cffi>=21.2",
        "click>=8.1",
        "cryptography>=41.0",
        "pydantic>=2.11",
        "rich>=13.0",
        "structlog>=23.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lockbox=lockbox.cli.entry_points:entrypoint",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
