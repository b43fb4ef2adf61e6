"""Configuration management for the issue-scribe MCP server."""

import os
from typing import Optional
from dataclasses import dataclass
import structlog
from dotenv import load_dotenv

logger = structlog.get_logger(__name__)


class ConfigurationError(ValueError):
    """Raised when required configuration is missing or invalid."""
    pass


@dataclass
class GitHubConfig:
    """GitHub connection configuration."""
    token: str
    api_url: str = "https://api.github.com"
    timeout: int = 30
    verify_ssl: bool = True


@dataclass
class MCPConfig:
    """MCP server configuration."""
    server_name: str = "issue-scribe-mcp"
    version: str = "1.0.0"
    default_per_page: int = 30
    log_level: str = "INFO"


@dataclass
class Config:
    """Main configuration container."""
    github: GitHubConfig
    mcp: MCPConfig


class ConfigLoader:
    """Configuration loader using environment variables only."""
    
    def __init__(self):
        """Initialize configuration loader."""
        self._config: Optional[Config] = None
        # Load .env file if it exists
        load_dotenv()
    
    def load(self) -> Config:
        """Load configuration from environment variables.
        
        Returns:
            Config: Loaded configuration
            
        Raises:
            ConfigurationError: If GITHUB_TOKEN is missing
        """
        if self._config is not None:
            return self._config
        
        logger.debug("Loading configuration from environment variables")
        self._config = self._create_config_from_env()
        logger.debug("Configuration loaded successfully",
                     api_url=self._config.github.api_url,
                     server_name=self._config.mcp.server_name)
        return self._config
    
    def _create_config_from_env(self) -> Config:
        """Create configuration objects from environment variables."""
        token = os.getenv('GITHUB_TOKEN')
        if not token:
            raise ConfigurationError("GITHUB_TOKEN environment variable is required")
        
        github_config = GitHubConfig(
            token=token,
            api_url=os.getenv('GITHUB_API_URL', 'https://api.github.com'),
            timeout=self._get_int_env('GITHUB_TIMEOUT', 30),
            verify_ssl=self._get_bool_env('GITHUB_VERIFY_SSL', True)
        )
        
        default_per_page = self._get_int_env('MCP_DEFAULT_PER_PAGE', 30)
        if not 1 <= default_per_page <= 100:
            logger.warning("MCP_DEFAULT_PER_PAGE out of range, using default",
                           value=default_per_page, default=30)
            default_per_page = 30
        
        mcp_config = MCPConfig(
            server_name=os.getenv('MCP_SERVER_NAME', 'issue-scribe-mcp'),
            version=os.getenv('MCP_VERSION', '1.0.0'),
            default_per_page=default_per_page,
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper()
        )
        
        return Config(github=github_config, mcp=mcp_config)
    
    def _get_int_env(self, env_var: str, default: int) -> int:
        """Get integer value from environment variable with default."""
        value = os.getenv(env_var)
        if value is None:
            return default
        
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for environment variable, using default", 
                         env_var=env_var, value=value, default=default)
            return default
    
    def _get_bool_env(self, env_var: str, default: bool) -> bool:
        """Get boolean value from environment variable with default."""
        value = os.getenv(env_var)
        if value is None:
            return default
        
        return value.lower() in ('true', '1', 'yes', 'on')
    
    def reload(self) -> Config:
        """Reload configuration from environment variables."""
        load_dotenv(override=True)
        self._config = None
        return self.load()


def load_config() -> Config:
    """Load a fresh configuration from the environment."""
    return ConfigLoader().load()
