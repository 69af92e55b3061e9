"""
Pydantic model for pipeline configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator

DEFAULT_CATALOG_URL = "https://api.steampowered.com/ISteamApps/GetAppList/v2/"
DEFAULT_STORE_SEARCH_URL = "https://store.steampowered.com/search/"
DEFAULT_DETAILS_URL = "https://store.steampowered.com/api/appdetails"
# Requests for archives are routed through a proxy; the object key is appended
# to the end of this prefix as "<app_id>.zip".
DEFAULT_ARCHIVE_BASE_URL = (
    "https://walftech.com/proxy.php?url="
    "https%3A%2F%2Fsteamgames554.s3.us-east-1.amazonaws.com%2F"
)

PLUGIN_SUBDIR = ("config", "stplug-in")
MANIFEST_SUBDIR = ("depotcache",)


class PipelineConfig(BaseModel):
    """A validated configuration model for the install pipeline."""

    # Staging
    staging_dir: str = "downloads"

    # Remote endpoints
    catalog_url: str = DEFAULT_CATALOG_URL
    store_search_url: str = DEFAULT_STORE_SEARCH_URL
    details_url: str = DEFAULT_DETAILS_URL
    archive_base_url: str = DEFAULT_ARCHIVE_BASE_URL

    # Network timeouts (seconds)
    search_timeout: float = 15
    catalog_timeout: float = 15
    details_timeout: float = 10
    archive_timeout: float = 30

    # Resolution limits
    search_limit: int = 10
    catalog_match_limit: int = 5

    # Processes and installation
    target_process: str = "steam.exe"
    target_executable: str = "steam.exe"
    helper_process: str = "steamtools.exe"
    helper_executable: str = "SteamTools.exe"
    helper_path: str = ""
    install_root: str = ""

    # Restart sequence delays (seconds)
    close_settle_delay: float = 1.0
    post_close_delay: float = 1.0
    helper_run_delay: float = 2.0
    post_helper_delay: float = 2.0
    start_settle_delay: float = 1.0

    # Logging
    json_log: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator(
        "search_timeout", "catalog_timeout", "details_timeout", "archive_timeout"
    )
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensures every network timeout is positive."""
        if v <= 0:
            raise ValueError("Timeouts must be greater than zero.")
        return v

    @field_validator(
        "close_settle_delay",
        "post_close_delay",
        "helper_run_delay",
        "post_helper_delay",
        "start_settle_delay",
    )
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Delays cannot be negative.")
        return v

    @field_validator("search_limit", "catalog_match_limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        """Ensures result limits stay in a reasonable range."""
        if v < 1 or v > 50:
            raise ValueError("Result limits must be between 1 and 50.")
        return v

    @field_validator(
        "catalog_url", "store_search_url", "details_url", "archive_base_url"
    )
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Endpoint must be an http(s) URL, got: {v!r}")
        return v

    @field_validator("staging_dir")
    @classmethod
    def validate_staging_dir(cls, v: str) -> str:
        if not v:
            raise ValueError("Staging directory cannot be empty.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
