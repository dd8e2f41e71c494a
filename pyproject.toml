[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wsforge"
version = "0.1.0"
description = "Building blocks for WebSocket and HTTP servers: pub/sub topic tree, PROXY v2 parser, option parsing, client settings and build helpers"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "websocket",
    "http",
    "pubsub",
    "proxy-protocol",
    "getopt",
    "crc32",
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
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
wsforge-build = "wsforge.build:main"

[tool.hatch.build.targets.wheel]
packages = ["wsforge"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
