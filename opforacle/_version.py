import importlib.metadata

try:
    __version__ = importlib.metadata.version("opforacle")
except importlib.metadata.PackageNotFoundError:
    # not installed, e.g. run from a source checkout
    __version__ = "0.1.0"
