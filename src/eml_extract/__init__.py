"""EML Extract - metadata extraction from EML email files.

This package parses raw EML messages, extracts their identifying and
threading metadata, links them into a reply/reference graph and emits the
result as an XML document for archival tooling.
"""

__version__ = "0.1.0"

from eml_extract.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
