"""
MCP (Model Context Protocol) server for external AI agents.

This module provides an MCP server that lets external AI agents read and
write problems, research and experiments through the tracker REST API.
"""
