"""Configuration management for fitness progress analysis."""

import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


# load environment variables from .env file
load_dotenv()


@dataclass(frozen=True)
class SupabaseConfig:
    """Supabase project and user settings."""

    url: str
    anon_key: str
    user_id: str
    access_token: Optional[str] = None

    @property
    def rest_base(self) -> str:
        """Base URL of the PostgREST endpoint."""
        return f"{self.url.rstrip('/')}/rest/v1"

    @property
    def bearer_token(self) -> str:
        """Token sent as Authorization; the anon key when no user token is set."""
        return self.access_token or self.anon_key

    @classmethod
    def from_env(cls) -> "SupabaseConfig":
        """
        Create config from environment variables.
        """
        url = os.getenv("SUPABASE_URL")
        anon_key = os.getenv("SUPABASE_ANON_KEY")
        user_id = os.getenv("SUPABASE_USER_ID")

        if not all([url, anon_key, user_id]):
            raise ValueError(
                "Missing required Supabase environment variables. "
                "Ensure SUPABASE_URL, SUPABASE_ANON_KEY, and "
                "SUPABASE_USER_ID are set."
            )

        return cls(
            url=url,
            anon_key=anon_key,
            user_id=user_id,
            access_token=os.getenv("SUPABASE_ACCESS_TOKEN"),
        )


@dataclass(frozen=True)
class GatewayConfig:
    """AI gateway settings for meal analysis."""

    api_key: str
    api_base: str = "https://ai.gateway.lovable.dev/v1"
    model: str = "google/gemini-2.5-flash"

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        """
        Create config from environment variables.
        """
        api_key = os.getenv("LOVABLE_API_KEY")
        if not api_key:
            raise ValueError("LOVABLE_API_KEY is not configured")

        return cls(
            api_key=api_key,
            api_base=os.getenv("AI_GATEWAY_URL", cls.api_base),
            model=os.getenv("AI_MODEL", cls.model),
        )


@dataclass(frozen=True)
class PathConfig:
    """File path configuration."""

    base_dir: Path
    data_dir: Path
    output_dir: Path
    export_dir: Path

    @classmethod
    def default(cls) -> "PathConfig":
        """
        Create default path configuration.
        """
        base = Path(__file__).parent.parent
        return cls(
            base_dir=base,
            data_dir=base / "data",
            output_dir=base / "output",
            export_dir=base / "export",
        )


@dataclass(frozen=True)
class AppConfig:
    """Application-wide configuration."""

    supabase: Optional[SupabaseConfig]
    gateway: Optional[GatewayConfig]
    paths: PathConfig

    @classmethod
    def load(cls) -> "AppConfig":
        """
        Load full application configuration.
        """
        try:
            supabase = SupabaseConfig.from_env()
        except ValueError:
            supabase = None

        try:
            gateway = GatewayConfig.from_env()
        except ValueError:
            gateway = None

        return cls(supabase=supabase, gateway=gateway, paths=PathConfig.default())
