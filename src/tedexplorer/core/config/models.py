"""
Pydantic configuration models for TED Explorer.

These models provide type-safe configuration with validation for:
- SPARQL endpoint access and failure policy
- Search paging and export limits
- Database and logging settings
- CPV code / country metadata offered to search forms
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Endpoint Configuration
# =============================================================================


class EndpointConfig(BaseModel):
    """SPARQL endpoint access settings."""

    url: str = Field(
        default="https://publications.europa.eu/webapi/rdf/sparql",
        description="SPARQL endpoint accepting POSTed queries",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Request timeout in seconds",
    )
    user_agent: str = Field(
        default="TED-Explorer/1.0",
        description="User-Agent header sent with every query",
    )
    max_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Attempts per query on transport failure (1 = no retry)",
    )
    fallback_on_error: bool = Field(
        default=False,
        description="Serve a labelled synthetic dataset when the endpoint fails",
    )

    @field_validator("url")
    @classmethod
    def url_is_http(cls, v: str) -> str:
        """Only http(s) endpoints are supported."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("endpoint url must start with http:// or https://")
        return v


# =============================================================================
# Search Configuration
# =============================================================================


class SearchConfig(BaseModel):
    """Paging and export limits."""

    default_page_size: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Page size used when a search does not specify one",
    )
    max_export_rows: int = Field(
        default=10000,
        ge=1,
        description="Upper bound on rows fetched for a full export",
    )
    fallback_total: int = Field(
        default=150,
        ge=0,
        description="Total reported by the synthetic fallback dataset",
    )


# =============================================================================
# Metadata
# =============================================================================


class CpvCode(BaseModel):
    """A CPV division offered as a search filter."""

    code: str
    description: str


class Country(BaseModel):
    """A country offered as a search filter."""

    code: str
    name: str


DEFAULT_CPV_CODES = [
    ("03000000", "Agricultural, farming, fishing, forestry and related products"),
    ("09000000", "Petroleum products, fuel, electricity and other sources of energy"),
    ("15000000", "Food, beverages, tobacco and related products"),
    ("30000000", "Office and computing machinery, equipment and supplies"),
    ("32000000", "Radio, television, communication, telecommunication and related equipment"),
    ("33000000", "Medical equipments, pharmaceuticals and personal care products"),
    ("34000000", "Transport equipment and auxiliary products to transportation"),
    ("45000000", "Construction work"),
    ("48000000", "Software package and information systems"),
    ("50000000", "Repair and maintenance services"),
    ("60000000", "Transport services (excl. Waste transport)"),
    ("71000000", "Architectural, construction, engineering and inspection services"),
    ("72000000", "IT services: consulting, software development, Internet and support"),
    ("79000000", "Business services: law, marketing, consulting, recruitment, printing and security"),
    ("80000000", "Education and training services"),
    ("85000000", "Health and social work services"),
    ("90000000", "Sewage, refuse, cleaning and environmental services"),
]

DEFAULT_COUNTRIES = [
    ("AT", "Austria"),
    ("BE", "Belgium"),
    ("BG", "Bulgaria"),
    ("HR", "Croatia"),
    ("CY", "Cyprus"),
    ("CZ", "Czechia"),
    ("DK", "Denmark"),
    ("EE", "Estonia"),
    ("FI", "Finland"),
    ("FR", "France"),
    ("DE", "Germany"),
    ("GR", "Greece"),
    ("HU", "Hungary"),
    ("IE", "Ireland"),
    ("IT", "Italy"),
    ("LV", "Latvia"),
    ("LT", "Lithuania"),
    ("LU", "Luxembourg"),
    ("MT", "Malta"),
    ("NL", "Netherlands"),
    ("PL", "Poland"),
    ("PT", "Portugal"),
    ("RO", "Romania"),
    ("SK", "Slovakia"),
    ("SI", "Slovenia"),
    ("ES", "Spain"),
    ("SE", "Sweden"),
]


# =============================================================================
# Database Configuration
# =============================================================================


class DatabaseConfig(BaseModel):
    """Database connection settings."""

    url: str = Field(
        default="sqlite:///data/tedexplorer.db",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements (debugging)",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=Path("logs/tedexplorer.log"),
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    data_dir: Path = Field(
        default=Path("data"),
        description="Data storage directory",
    )
    export_dir: Path = Field(
        default=Path("exports"),
        description="Directory CSV exports are written to",
    )
    owner: str = Field(
        default="local",
        min_length=1,
        description="Owner identity saved tenders and analyses are filed under",
    )

    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    cpv_codes: list[CpvCode] = Field(
        default_factory=lambda: [CpvCode(code=c, description=d) for c, d in DEFAULT_CPV_CODES],
    )
    countries: list[Country] = Field(
        default_factory=lambda: [Country(code=c, name=n) for c, n in DEFAULT_COUNTRIES],
    )

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        for dir_path in [self.data_dir, self.export_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

        if self.logging.file:
            self.logging.file.parent.mkdir(parents=True, exist_ok=True)
