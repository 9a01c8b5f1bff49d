#!/usr/bin/env python3
"""Setup script for ghost - portable working tree snapshots."""

import subprocess
from pathlib import Path
from setuptools import find_packages, setup
from setuptools.command.build_py import build_py
from setuptools.command.install import install


def get_git_commit():
    """Get the current git commit hash."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            cwd=Path(__file__).parent
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return "unknown"


def update_version_file_with_git_hash():
    """Update _version.py with the current git commit hash."""
    version_file = Path(__file__).parent / "ghost" / "_version.py"
    if not version_file.exists():
        return

    git_commit = get_git_commit()

    content = version_file.read_text(encoding="utf-8")

    lines = content.split('\n')
    updated_lines = []
    for line in lines:
        if line.startswith('GHOST_GIT_COMMIT'):
            updated_lines.append(f'GHOST_GIT_COMMIT = "{git_commit}"')
        else:
            updated_lines.append(line)

    version_file.write_text('\n'.join(updated_lines), encoding="utf-8")
    print(f"Updated _version.py with git commit: {git_commit}")


class BuildPyCommand(build_py):
    """Custom build command to capture git hash."""

    def run(self):
        update_version_file_with_git_hash()
        super().run()


class InstallCommand(install):
    """Custom install command to capture git hash."""

    def run(self):
        update_version_file_with_git_hash()
        super().run()


# Avoid importing the package during setup
version_ns = {}
version_file = Path(__file__).parent / "ghost" / "_version.py"
if version_file.exists():
    exec(version_file.read_text(encoding="utf-8"), version_ns)
GHOST_VERSION = version_ns.get("GHOST_VERSION", "0.0.0")

readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="ghost-snapshot",
    version=GHOST_VERSION,
    description="ghost - capture and replay working tree state as portable git artifacts",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="ghost Team",
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        # Development extras
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=4.0.0',
            'black>=23.0.0',
            'mypy>=1.0.0',
            'pylint>=2.16.0',
        ],
    },
    packages=find_packages(
        exclude=["tests", "tests.*", "build", "build.*"]
    ),
    entry_points={
        "console_scripts": [
            "ghost=ghost.main:main",
        ],
    },
    cmdclass={
        'build_py': BuildPyCommand,
        'install': InstallCommand,
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Version Control :: Git",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="git snapshot patch bundle working-tree",
)
