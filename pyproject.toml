[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rvpipe"
version = "0.1.0"
description = "Datapath components and a stall-only five-stage pipelined RV32 processor model"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "risc-v",
    "rv32",
    "pipeline",
    "simulator",
    "hazard",
    "forwarding",
    "computer-architecture",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rvpipe"]

[tool.pytest.ini_options]
addopts = "-ra"
