[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chatrelay"
version = "0.1.0"
description = "A small TCP chat server that relays JSON chat messages to every connected client"
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "server", "tcp", "json", "broadcast"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
chat-server = "chatrelay.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["chatrelay"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
