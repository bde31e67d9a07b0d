"""tendril - wiki markup codec and save coordination for the document editor."""

__version__ = "0.1.0"
