[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "touchfilt"
version = "0.1.0"
description = "Touchscreen sample filters (smoothing, debouncing, cropping, thresholding) and raw touchscreen protocol decoders."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "touchscreen",
    "touch",
    "filter",
    "multitouch",
    "dejitter",
    "debounce",
    "iir",
    "serial",
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
    "Topic :: Scientific/Engineering :: Human Machine Interfaces",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["touchfilt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
