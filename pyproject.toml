[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "crystaltools"
version = "1.0.0"
description = "Build tools for Game Boy Color ROM projects: palettes, sprite animations, include scanning, LZ command streams and patches"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "game boy",
    "gbc",
    "rom",
    "build tools",
    "lz compression",
    "2bpp",
    "palette",
    "patch",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: System :: Archiving :: Compression",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[project.scripts]
gbcpal = "crystaltools.gbcpal:main"
png_dimensions = "crystaltools.png_dimensions:main"
scan_includes = "crystaltools.scan_includes:main"
pokemon_animation = "crystaltools.pokemon_animation:main"
pokemon_animation_graphics = "crystaltools.pokemon_animation_graphics:main"
make_patch = "crystaltools.make_patch:main"

[tool.hatch.build.targets.wheel]
packages = ["crystaltools"]

[tool.hatch.build.targets.sdist]
include = [
    "crystaltools",
    "tests",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
