"""A lightweight job queue library with in-memory queues and HTTP workers."""

__version__ = "1.0.0"