[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "airquality"
version = "0.1.0"
description = "Download, store, summarise and plot air-quality measurements from a public station network."
requires-python = ">=3.10"
keywords = ["air quality", "pollution", "sensors", "monitoring stations", "trend", "plot"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
]
dependencies = [
    "matplotlib",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
airquality = "airquality.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["airquality"]

[tool.pytest.ini_options]
addopts = "-ra"
