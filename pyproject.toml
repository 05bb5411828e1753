[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mev_relay"
version = "0.1.0"
description = "Swap event model, DEX protocol detection, event filtering, normalisation and in-memory storage for mempool and bundle monitoring"
requires-python = ">=3.10"
dependencies = []
keywords = ["mev", "ethereum", "mempool", "flashbots", "swap", "dex"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mev_relay"]

[tool.pytest.ini_options]
addopts = "-ra"
