[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ucnscan"
version = "0.1.0"
description = "Serial-port control of a two-axis stepper scanner, with serial port discovery helpers"
requires-python = ">=3.10"
dependencies = [
    "pyserial",
]
keywords = ["serial", "scanner", "stepper", "arduino", "instrument control"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
ucnscan = "ucnscan.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ucnscan"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
