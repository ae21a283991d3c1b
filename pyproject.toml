[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trafficdash"
version = "0.1.0"
description = "Real-time network traffic monitor with a colour-coded terminal dashboard"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "network",
    "monitoring",
    "packet-capture",
    "sniffer",
    "dashboard",
    "terminal",
    "osi",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
trafficdash = "trafficdash.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["trafficdash"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
