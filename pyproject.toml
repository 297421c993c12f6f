[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bcdlab"
version = "0.1.0"
description = "Cycle simulation of an 8-bit counter with a binary-to-BCD decoder, stepped from a Vbuddy board over a serial link and traced to VCD"
requires-python = ">=3.10"
keywords = ["bcd", "double-dabble", "simulation", "vcd", "vbuddy", "serial", "testbench"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]
dependencies = [
    "pyserial",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
bcdlab = "bcdlab.testbench:main"

[tool.hatch.build.targets.wheel]
packages = ["bcdlab"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
