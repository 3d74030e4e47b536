"""Configuration management with Pydantic models."""

from pathlib import Path

from pydantic import BaseModel, Field


class FetcherConfig(BaseModel):
    """Configuration for the HTTP transport."""

    timeout_ms: int = Field(default=30000, ge=1000, le=120000)
    user_agent: str = "DocLoader/0.1 (Document Loader)"
    follow_redirects: bool = True  # HTTP 3xx, handled by the transport
    max_connections: int = Field(default=10, ge=1, le=100)


class LoaderConfig(BaseModel):
    """Configuration for document navigation."""

    follow_meta_refresh: bool = False
    max_refreshes: int = Field(default=0, ge=0)  # 0 = unlimited
    strict_refresh: bool = True  # Raise on malformed refresh content


class AppConfig(BaseModel):
    """Main application configuration."""

    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    verbose: bool = False

    @classmethod
    def from_toml(cls, path: Path) -> "AppConfig":
        """Load config from a TOML file."""
        try:
            import tomllib  # type: ignore[import-not-found]
        except ModuleNotFoundError:
            import tomli as tomllib  # type: ignore[import-not-found]
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)

    def to_toml(self) -> str:
        """Serialize config to TOML format."""
        data = self.model_dump(mode="json", exclude_defaults=True)
        return _dict_to_toml(data)


def _toml_value(v: object) -> str:
    """Format a Python value as a TOML literal."""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, int):
        return str(v)
    if isinstance(v, str):
        escaped = v.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return f'"{v}"'


def _dict_to_toml(data: dict) -> str:
    """Convert a config dict with one level of tables to TOML."""
    lines: list[str] = []
    for k, v in data.items():
        if not isinstance(v, dict):
            lines.append(f"{k} = {_toml_value(v)}")
    for k, v in data.items():
        if isinstance(v, dict):
            lines.append(f"\n[{k}]")
            for sk, sv in v.items():
                lines.append(f"{sk} = {_toml_value(sv)}")
    return "\n".join(lines).lstrip("\n") + "\n"
