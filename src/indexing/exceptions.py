"""Custom exceptions for the indexing module."""


class IndexingError(Exception):
    """Base exception for chat log indexing errors."""
    pass


class ConfigError(IndexingError):
    """Exception for missing or invalid configuration."""
    pass


class LogSourceError(IndexingError):
    """Exception for a room source directory that cannot be listed."""
    pass


class LogFileError(IndexingError):
    """Exception for a log file that cannot be read or parsed."""
    pass


class IndexWriteError(IndexingError):
    """Exception for search index construction errors."""
    pass


class SplitError(IndexingError):
    """Exception for failures of the external index splitter."""
    pass
