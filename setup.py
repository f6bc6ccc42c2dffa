from __future__ import annotations

from pathlib import Path

from setuptools import find_packages, setup


def load_version() -> str:
    """Read __version__ from the package without importing it."""
    init_file = Path(__file__).resolve().parent / "src" / "routeplanner" / "__init__.py"
    for line in init_file.read_text(encoding="utf-8").splitlines():
        if line.startswith("__version__"):
            return line.split("=", 1)[1].strip().strip("\"'")
    return "0.0.0"


def load_dependencies() -> list[str]:
    """Assemble install_requires for the route planning engine."""
    return [
        # Routing collaborator HTTP client
        "aiohttp>=3.8.0",
        # Routing response validation
        "pydantic>=2.0.0",
    ]


setup(
    name="routeplanner",
    version=load_version(),
    description="Route editing and navigation engine with waypoint ordering and animated camera framing",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=load_dependencies(),
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "routeplanner=routeplanner.cli:main",
        ],
    },
)
