"""Surfaces for the Gemini Image Generator: MCP server, CLI and HTTP API."""
