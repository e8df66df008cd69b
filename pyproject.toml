[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "serialkit"
version = "1.4.0"
description = "Serial and TCP/UDP terminal toolkit with waveform frame encoding, value display and image capture tools"
requires-python = ">=3.10"
keywords = ["serial", "uart", "tcp", "udp", "terminal", "waveform", "embedded"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals :: Serial",
    "Topic :: Software Development :: Embedded Systems",
]
dependencies = [
    "pyserial",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
serialkit = "serialkit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["serialkit"]

[tool.pytest.ini_options]
addopts = "-ra"
