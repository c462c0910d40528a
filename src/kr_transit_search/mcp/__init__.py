"""MCP (Model Context Protocol) server module for Korean transit search.

This module provides MCP server implementation that exposes bus stop and
subway station search through the Model Context Protocol.
"""

from .server import TransitMCPServer, main

__all__ = ["TransitMCPServer", "main"]
