"""MCP server for PDF inspection and search.

This package provides a Model Context Protocol (MCP) server that exposes
pdf_agent's metadata, text extraction, outline and search functionality to
LLMs.

The server runs over stdio transport and provides these tools:
- get_pdf_metadata: Document information and page count
- get_pdf_text: Plain text for a page range
- search_pdf: Literal or regex search with context snippets
- get_pdf_outline: Bookmarks / table of contents
- download_pdf: Fetch a PDF over HTTP(S) (only when network access is allowed)

Security features include:
- Path allowlist for reads
- Network access control with private address blocking
- Symlink resolution and path traversal prevention

Usage
-----
Run the server from command line:
    $ pdf-agent-mcp

With configuration:
    $ pdf-agent-mcp --read-dirs "/home/user/papers" --allow-network

Or use environment variables:
    $ export PDF_AGENT_MCP_ALLOWED_READ_DIRS="/home/user/papers"
    $ pdf-agent-mcp

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

from pdf_agent.mcp.config import MCPConfig
from pdf_agent.mcp.security import MCPSecurityError
from pdf_agent.mcp.server import main

__all__ = [
    "main",
    "MCPConfig",
    "MCPSecurityError",
]
