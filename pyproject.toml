[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sockkit"
version = "0.1.0"
description = "Convenience helpers for TCP, UDP, UNIX-domain and multicast sockets, plus poll and epoll readiness sets"
requires-python = ">=3.10"
dependencies = []
keywords = ["socket", "tcp", "udp", "unix-socket", "multicast", "poll", "epoll", "networking"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sockkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
