[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gcodeview"
version = "0.1.0"
description = "G-code parsing, arc expansion and toolpath line segments for visualising CNC programs"
requires-python = ">=3.10"
dependencies = []
keywords = ["gcode", "cnc", "grbl", "toolpath", "arc", "parser", "heightmap"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Manufacturing",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gcodeview"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
