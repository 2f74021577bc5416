"""
Configuration for the MCP agent-tool server.
"""

from pydantic_settings import BaseSettings


class MCPSettings(BaseSettings):
    """Settings read from TRACKER_* environment variables."""

    API_URL: str = "http://localhost:8000/api/v1"
    API_TIMEOUT: float = 30.0
    LOG_LEVEL: str = "INFO"

    class Config:
        env_prefix = "TRACKER_"
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


mcp_settings = MCPSettings()
