#!/usr/bin/env python
"""Setup configuration for Breakpad Symbolizer."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="breakpad-symbolizer",
    version="1.0.0",
    author="",
    author_email="",
    description="Resolve crash addresses with Breakpad text symbol files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "examples", "docs"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Debuggers",
        "Environment :: Console",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "breakpad-symbolizer=breakpad_symbolizer.cli:main",
            "addr2line-breakpad=breakpad_symbolizer.cli:addr2line_main",
            "ips-breakpad=breakpad_symbolizer.cli:ips_main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
