"""Configuration settings for the integration hub service."""

from typing import Dict, Any, List
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # Service Configuration
    service_name: str = "integration-hub"
    port: int = 8000
    environment: str = "development"
    debug: bool = False

    # Webhook Configuration
    webhook_base_url: str = "http://localhost:8000/api/v1/webhooks"
    webhook_strict_signatures: bool = False
    webhook_event_log_limit: int = 50

    # Event bus
    event_listeners_enabled: bool = True
    event_history_limit: int = 200

    # Provider calls
    action_timeout_seconds: float = 30.0
    probe_timeout_seconds: float = 10.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8080"]

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Webhook verification policies, keyed by integration id
WEBHOOK_POLICIES: Dict[str, Dict[str, Any]] = {
    "slack": {
        "signature_header": "x-slack-signature",
        "timestamp_header": "x-slack-request-timestamp",
        "max_age_seconds": 300,  # 5 minutes
    },
    "github": {
        "signature_header": "x-hub-signature-256",
        "max_age_seconds": 300,
    },
    "zapier": {
        "signature_header": "x-zapier-signature",
        "max_age_seconds": 300,
    },
    "generic": {
        "signature_header": "x-webhook-signature",
        "max_age_seconds": 600,  # 10 minutes
    },
}


# Integrations registered at startup
DEFAULT_INTEGRATIONS: List[Dict[str, Any]] = [
    {
        "id": "slack",
        "name": "Slack",
        "description": "Real-time team communication and notifications",
        "type": "webhook",
        "capabilities": ["notifications", "channel-posts", "direct-messages"],
        "icon": "💬",
        "category": "communication",
    },
    {
        "id": "teams",
        "name": "Microsoft Teams",
        "description": "Microsoft Teams integration for collaboration",
        "type": "oauth",
        "capabilities": ["notifications", "channel-posts", "file-sharing"],
        "icon": "👥",
        "category": "communication",
    },
    {
        "id": "google-drive",
        "name": "Google Drive",
        "description": "Cloud storage and file synchronization",
        "type": "oauth",
        "capabilities": ["file-upload", "file-sync", "sharing"],
        "icon": "📁",
        "category": "storage",
    },
    {
        "id": "zapier",
        "name": "Zapier",
        "description": "Automation workflows and triggers",
        "type": "webhook",
        "capabilities": ["automation", "triggers", "actions"],
        "icon": "⚡",
        "category": "automation",
    },
    {
        "id": "trello",
        "name": "Trello",
        "description": "Project management and task tracking",
        "type": "api-key",
        "capabilities": ["task-creation", "board-sync", "card-updates"],
        "icon": "📋",
        "category": "productivity",
    },
    {
        "id": "github",
        "name": "GitHub",
        "description": "Version control and issue tracking",
        "type": "oauth",
        "capabilities": ["issue-creation", "pull-requests", "repository-sync"],
        "icon": "🐙",
        "category": "productivity",
    },
    {
        "id": "jira",
        "name": "JIRA",
        "description": "Issue tracking and project management",
        "type": "api-key",
        "capabilities": ["issue-creation", "status-updates", "project-sync"],
        "icon": "🎯",
        "category": "productivity",
    },
    {
        "id": "email",
        "name": "Email Notifications",
        "description": "Send email notifications and reports",
        "type": "api-key",
        "capabilities": ["notifications", "reports", "alerts"],
        "icon": "📧",
        "category": "communication",
    },
]
