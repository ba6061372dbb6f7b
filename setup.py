"""Setup script for the cryptsetup generator."""

from setuptools import setup, find_packages
from pathlib import Path

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    with open(requirements_file) as f:
        requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    with open(readme_file, encoding='utf-8') as f:
        long_description = f.read()

setup(
    name="cryptsetup-generator",
    version="1.0.0",
    author="cryptsetup-generator developers",
    description="systemd generator turning crypttab and luks.* boot switches into cryptsetup units",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=requirements,
    extras_require={
        # journald logging; needs libsystemd headers to build
        "journal": ["systemd-python"],
        "test": ["pytest"],
    },
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "cryptsetup-generator=cryptsetup_generator.generator:main",
        ],
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: GNU Lesser General Public License v2 or later (LGPLv2+)",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Boot",
        "Topic :: Security :: Cryptography",
    ],
)
