"""Setup script for connforge."""

from setuptools import find_packages, setup

setup(
    name="connforge",
    version="0.1.0",
    description="Source generator for database connection pipeline stages",
    author="connforge Team",
    packages=find_packages(include=["connforge", "connforge.*"]),
    install_requires=[
        "typer>=0.9.0",  # CLI framework
        "rich>=12.0.0",  # Terminal output
        "pyyaml>=6.0",  # Job definitions
    ],
    package_data={
        "connforge": ["py.typed"],
    },
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
            "black>=22.1.0",
            "isort>=5.10.1",
            "flake8>=4.0.1",
            "mypy>=1.0.0",  # Type checking
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "connforge=connforge.cli.main:app",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Database",
        "Topic :: Software Development :: Code Generators",
    ],
)
