from pathlib import Path

from setuptools import find_packages, setup

this_directory = Path(__file__).parent
readme = this_directory / "README.md"

setup(
    name="expando",
    version="0.3.1",
    description="Expando format templates and rule-driven string rewriting for one-line displays",
    long_description=readme.read_text(encoding="utf-8") if readme.exists() else "",
    long_description_content_type="text/markdown",
    author="GAHEOS",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "expando=expando.cli:main",
        ],
    },
)
