"""
Setup script for nepalijets-learning.

NepaliJets is an adaptive vocabulary practice core for learning Nepali.
It serves two roles:

1. Learning Core - SM-2 scheduling, difficulty adaptation, mastery tracking
   and personalized practice paths as an importable library
2. Terminal Companion - the 'jets' command for offline practice backed by
   a local SQLite progress store
"""

from setuptools import find_namespace_packages, setup

setup(
    name="nepalijets-learning",
    version="1.0.0",
    description="Adaptive Nepali vocabulary practice - spaced repetition and personalized paths",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="NepaliJets",
    packages=find_namespace_packages(include=["src", "src.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "jets=src.delivery.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition sm2 vocabulary nepali cli education",
)
