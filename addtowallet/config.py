from pathlib import Path
from typing import Literal, Optional

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://app.addtowallet.co"

PACKAGE_DIR = Path(__file__).resolve().parent


def default_node_packages_dir(package_dir: Path = PACKAGE_DIR) -> Path:
    """
    Node packages shipped inside an installed wheel live next to the code;
    a source checkout keeps them at the repository root.
    """
    bundled = package_dir / "node_packages"
    if bundled.is_dir():
        return bundled
    return package_dir.parent / "node_packages"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="ADDTOWALLET_", env_ignore_empty=True, extra="ignore"
    )
    PROJECT_NAME: str = "AddToWallet"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    # Credential used by the CLI when none is passed explicitly
    BASE_URL: str = DEFAULT_BASE_URL
    API_KEY: Optional[str] = None

    # Seconds, applied to every outbound request
    HTTP_TIMEOUT: float = 30.0

    # Node packages location (default: bundled copy, else <repo>/node_packages)
    NODE_PACKAGES_DIR: Optional[Path] = None

    @field_validator("BASE_URL", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def node_packages_path(self) -> Path:
        if self.NODE_PACKAGES_DIR:
            return Path(self.NODE_PACKAGES_DIR)
        return default_node_packages_dir()


settings = Settings()  # type: ignore
