"""应用配置模块 - 使用 Pydantic Settings 管理环境变量"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Workflow Execution Engine", description="应用名称")
    app_version: str = Field(default="0.1.0", description="应用版本")
    env: Literal["development", "production", "test"] = Field(
        default="development", description="运行环境"
    )
    debug: bool = Field(default=False, description="调试模式")
    log_level: str = Field(default="INFO", description="日志级别")

    # Server
    host: str = Field(default="0.0.0.0", description="服务器地址")
    port: int = Field(default=8000, description="服务器端口")
    reload: bool = Field(default=False, description="热重载")
    app_host_name: str = Field(
        default="localhost:8000", description="对外可访问的主机名（用于生成事件接入 URL）"
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./workflow_engine.db",
        description="数据库连接 URL",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        description="允许的跨域源",
    )

    # Integration API
    integration_api_uri: str = Field(
        default="https://api.integration.app", description="集成平台 API 地址"
    )
    connector_api_uri: str = Field(
        default="https://api.getmembrane.com", description="连接器元数据 API 地址"
    )
    integration_request_timeout: float = Field(default=30.0, description="集成平台请求超时（秒）")
    workspace_key: str = Field(default="", description="默认工作区 Key（请求头未提供时使用）")
    workspace_secret: str = Field(default="", description="默认工作区 Secret（请求头未提供时使用）")
    integration_token_ttl_seconds: int = Field(default=7200, description="集成访问令牌有效期（秒）")

    # Workflow Engine
    workflow_event_verification_secret: str = Field(
        default="change-this-workflow-event-secret",
        description="事件接入校验哈希的 HMAC 密钥",
    )
    workflow_max_attempts: int = Field(default=3, description="单次运行函数的最大尝试次数")
    step_memo_backend: Literal["database", "memory"] = Field(
        default="database", description="持久化步骤结果的存储后端"
    )
    http_node_timeout: float = Field(default=30.0, description="HTTP 节点请求超时（秒）")
    session_ttl_seconds: int = Field(default=1800, description="活跃会话空闲过期时间（秒）")

    # LLM Provider
    openai_api_key: str = Field(default="", description="OpenAI API Key")
    openai_base_url: str = Field(default="https://api.openai.com/v1", description="OpenAI Base URL")
    openai_model: str = Field(default="gpt-4o-mini", description="OpenAI 模型")


# 全局配置实例
settings = Settings()
