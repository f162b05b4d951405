"""
Custom exceptions for the Compression Visualizer library.
"""

class CompressionVisualizerError(Exception):
    """Base class for all Compression Visualizer specific errors."""
    pass

class SelectionError(CompressionVisualizerError, ValueError):
    """Raised when a wizard selection would break the selection invariants."""
    pass

class CatalogError(CompressionVisualizerError):
    """Raised when a catalog id does not name a known model, dataset or technique."""
    pass

class AnalysisUnavailable(CompressionVisualizerError):
    """
    Raised by an analysis service when no usable analysis can be produced.
    Covers transport errors, provider errors and malformed replies alike.
    """
    pass

class ConfigurationError(CompressionVisualizerError):
    """Raised for general configuration issues."""
    pass
