"""
Utility functions and helpers.

Components:
    - log_config: Logging configuration with a rich console handler

Example:
    ```python
    from promptshape.utils import setup_logging

    setup_logging(level="INFO", log_file="promptshape.log")
    ```
"""

from promptshape.utils.log_config import setup_logging

__all__ = ["setup_logging"]
