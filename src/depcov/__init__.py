"""depcov: attribute coverage of third-party code to the dependencies that ship it."""

__version__ = "0.1.0"
