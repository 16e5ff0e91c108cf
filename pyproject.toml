[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "solana-block-monitor"
version = "0.1.0"
description = "Watch confirmed Solana blocks over JSON-RPC and answer slot-confirmation queries over HTTP"
requires-python = ">=3.10"
keywords = ["solana", "blockchain", "monitoring", "rpc", "slots", "blocks"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]
dependencies = [
    "aiohttp",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
solana-block-monitor = "solana_block_monitor.app:main"

[tool.hatch.build.targets.wheel]
packages = ["solana_block_monitor"]

[tool.hatch.build.targets.sdist]
include = ["solana_block_monitor", "tests"]

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
