[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vcmfilters"
version = "0.1.0"
description = "Noise-reduction filters for planar video frames: adaptive median, salt-and-pepper removal, local variance, veed and a trainable neural filter."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "image processing",
    "video",
    "denoise",
    "median filter",
    "salt and pepper",
    "neural filter",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
    "Topic :: Multimedia :: Video",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["vcmfilters"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
