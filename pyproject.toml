[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pcsctl"
version = "0.1.0"
description = "Fixed-point parameters, CAN bit mapping, sine/SVPWM generation, a PI controller, a task scheduler and a line command terminal for a charger controller"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "can",
    "canbus",
    "fixed-point",
    "parameters",
    "svpwm",
    "pi-controller",
    "scheduler",
    "terminal",
    "charger",
]
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
    "Topic :: Software Development :: Embedded Systems :: Controller Area Network (CAN)",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pcsctl"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
