"""
CLI layer for yieldarray.

Terminal transport only: argument parsing and table output. The work is
done by :mod:`yieldarray.execution`.

Entry point::

    yieldarray --help
"""

from yieldarray.cli.app import app

__all__ = ["app"]
