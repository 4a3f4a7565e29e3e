"""Setup configuration for browser-cli.

- Installs the "browser-cli" console script
- Supports development mode (pip install -e .) and regular installs
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text() if readme_path.exists() else ""


def read_requirements(name):
    path = Path(__file__).parent / name
    if not path.exists():
        return []
    return [
        line.strip()
        for line in path.read_text().splitlines()
        if line.strip() and not line.startswith("#")
    ]


setup(
    name="browser-cli",
    version="0.1.0",
    description="Drive a running Chrome from the command line over the DevTools Protocol",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",

    packages=find_packages(include=["browser_cli", "browser_cli.*"]),

    install_requires=read_requirements("requirements.txt"),
    extras_require={
        "dev": read_requirements("requirements-dev.txt"),
    },

    entry_points={
        "console_scripts": [
            "browser-cli=browser_cli.cli.main:main",
        ],
    },

    python_requires=">=3.10",

    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Software Development :: Testing",
        "Topic :: Internet :: WWW/HTTP :: Browsers",
    ],

    keywords="chrome devtools cdp browser automation cli",
)
