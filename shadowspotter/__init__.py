"""Plain HTTP/1.1 exchanges, path fields, ranges and API description loading for content discovery."""

__version__ = "0.1.0"