[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sysmonbot"
version = "0.1.0"
description = "Periodic host metrics reports delivered through a Telegram bot, with Docker container reporting helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["monitoring", "telegram", "docker", "metrics", "linux"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sysmonbot = "sysmonbot.app:main"

[tool.hatch.build.targets.wheel]
packages = ["sysmonbot"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
