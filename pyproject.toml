[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zerochain"
version = "0.1.0"
description = "Blockchain node toolkit: 256-bit integers, accounts, UTXOs, blocks, a JSON-RPC client and a proof-of-work miner"
requires-python = ">=3.10"
keywords = ["blockchain", "uint256", "utxo", "json-rpc", "proof-of-work", "keccak"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["zerochain"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
