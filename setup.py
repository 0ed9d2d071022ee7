"""Setup script for dbimporter."""

from setuptools import find_packages, setup

setup(
    name="dbimporter",
    version="0.1.0",
    description="Async relational database importer with schema discovery",
    author="dbimporter Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "sqlalchemy[asyncio]>=2.0.0",  # Engine, pooling and catalog queries
        "aiosqlite>=0.19.0",  # SQLite async driver
        "asyncpg>=0.29.0",  # PostgreSQL async driver
        "pandas>=2.0.0",  # NULL sentinel and DataFrame export
        "pyarrow>=10.0.0",  # Schema interchange
        "typer>=0.12.0",  # CLI framework
        "rich>=13.0.0",  # CLI output
        "pyyaml>=6.0",  # Profile handling
    ],
    package_data={
        "dbimporter": ["py.typed"],
    },
    extras_require={
        "mssql": [
            "aioodbc>=0.5.0",  # SQL Server async driver
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
            "pytest-cov>=4.1.0",
            "black>=22.1.0",
            "isort>=5.10.1",
            "flake8>=4.0.1",
            "mypy>=1.0.0",  # Type checking
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "dbimporter=dbimporter.cli.main:app",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
