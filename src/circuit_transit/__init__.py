"""Circuit Transit: offline trip planning to the Circuit de Barcelona-Catalunya."""

__version__ = "0.1.0"
