# fitz_patchwork/config/schema.py
"""
Pydantic configuration models for fitz-patchwork.

All models use extra="ignore" to allow unknown YAML keys without crashing.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class OllamaConfig(BaseModel):
    """Ollama server configuration."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = Field(
        default="http://localhost:11434", description="Ollama API base URL"
    )
    model: str = Field(
        default="qwen2.5-coder:32b-instruct",
        description="Ollama model used to generate file edits",
    )
    timeout: int | None = Field(
        default=None, description="Request timeout in seconds (None = wait indefinitely)"
    )


class LMStudioConfig(BaseModel):
    """LM Studio server configuration."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = Field(
        default="http://localhost:1234/v1", description="LM Studio API base URL"
    )
    model: str = Field(default="local-model", description="LM Studio model to use")
    timeout: int | None = Field(
        default=None, description="Request timeout in seconds (None = wait indefinitely)"
    )


class GeminiConfig(BaseModel):
    """Google Gemini REST API configuration."""

    model_config = ConfigDict(extra="ignore")

    api_key: str | None = Field(
        default=None,
        description="Gemini API key (None = read GEMINI_API_KEY at load time)",
    )
    model: str = Field(default="gemini-2.0-flash", description="Gemini model name")
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
        description="Gemini models endpoint",
    )


class AnthropicConfig(BaseModel):
    """Anthropic API configuration."""

    model_config = ConfigDict(extra="ignore")

    api_key: str | None = Field(
        default=None,
        description="Anthropic API key (None = read ANTHROPIC_API_KEY at load time)",
    )
    model: str = Field(
        default="claude-sonnet-4-5-20250929",
        description="Model used to generate file edits",
    )
    max_tokens: int = Field(
        default=8192,
        ge=1,
        le=64000,
        description="Maximum tokens for the generated response",
    )


class LayoutConfig(BaseModel):
    """Where the target project keeps its database and UI files."""

    model_config = ConfigDict(extra="ignore")

    source_root: str = Field(default="src", description="Root source folder")
    alias_prefix: str = Field(
        default="@/", description="Import alias that maps onto the source root"
    )
    schema_path: str = Field(default="src/db/schema.ts", description="Drizzle schema file")
    connection_path: str = Field(
        default="src/db/connection.ts", description="Database connection bootstrap file"
    )
    seed_path: str = Field(default="src/db/seed.ts", description="Seed data script")
    sync_path: str = Field(default="src/db/sync.ts", description="Schema sync script")
    routes_dir: str = Field(
        default="src/app/api", description="Directory holding one folder per API route"
    )
    components_dir: str = Field(
        default="src/components", description="Directory holding UI components"
    )
    composition_path: str = Field(
        default="src/components/main-content.tsx",
        description="UI file into which new components are spliced",
    )
    manifest_path: str = Field(default="package.json", description="Project manifest")
    database_file: str = Field(
        default="sqlite.db", description="SQLite file, relative to the working directory"
    )
    module_extension: str = Field(
        default=".ts", description="Extension appended to extensionless local imports"
    )
    known_folders: list[str] = Field(
        default_factory=lambda: ["db", "app", "components", "lib", "hooks"],
        description="Bare top-level folders that live under the source root",
    )

    def route_path(self, route_name: str) -> str:
        """Project-relative path of the route handler for a kebab-case route."""
        return f"{self.routes_dir.rstrip('/')}/{route_name}/route.ts"


class OutputConfig(BaseModel):
    """Console and confirmation behavior."""

    model_config = ConfigDict(extra="ignore")

    verbosity: Literal["quiet", "normal", "verbose"] = Field(
        default="normal", description="Logging verbosity level"
    )
    auto_accept: bool = Field(
        default=False, description="Write every file without asking for confirmation"
    )


class PatchworkConfig(BaseModel):
    """Root configuration for fitz-patchwork."""

    model_config = ConfigDict(extra="ignore")

    provider: Literal["ollama", "lm_studio", "gemini", "anthropic"] = Field(
        default="ollama", description="LLM provider to use"
    )
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    lm_studio: LMStudioConfig = Field(default_factory=LMStudioConfig)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
