from __future__ import annotations

from setuptools import find_packages, setup


def load_dependencies() -> list[str]:
    """Assemble install_requires."""
    return [
        # HTTP client for the observation API
        "httpx>=0.27.0",
        # Data handling
        "pydantic>=2.0.0",
        # Geocoding
        "geopy>=2.4.0",
        # Part-of-speech tagging
        "nltk>=3.8.1",
    ]


setup(
    name="neighborhood-nature",
    version="0.1.0",
    description="Plan walking routes around recently observed plants and animals",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={
        "neighborhood_nature": ["static/*", "data/*.json"],
    },
    install_requires=load_dependencies(),
    extras_require={
        "test": ["pytest>=7.4.0"],
    },
    entry_points={
        "console_scripts": [
            "neighborhood-nature=neighborhood_nature.__main__:main",
        ],
    },
)
