[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bgkit"
version = "0.1.0"
description = "Multi-format image file input/output with pixel-format conversion, and a hierarchical text tree store"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = [
    "image",
    "ppm",
    "pgm",
    "tga",
    "targa",
    "ilbm",
    "iff",
    "rgbe",
    "hdr",
    "png",
    "jpeg",
    "pixel-format",
    "config",
    "tree",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Text Processing :: General",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["bgkit"]

[tool.pytest.ini_options]
addopts = "-ra"
