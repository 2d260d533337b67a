[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pacman-repo-builder"
version = "0.0.65"
description = "Build a custom pacman repository from a collection of PKGBUILD directories"
requires-python = ">=3.10"
keywords = ["pacman", "arch", "archlinux", "pkgbuild", "makepkg", "srcinfo"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
build-pacman-repo = "pacman_repo_builder.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pacman_repo_builder"]

[tool.pytest.ini_options]
addopts = "-ra"
