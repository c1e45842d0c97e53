from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")
	# Generation parameters are fixed server-side; clients never see or override them
	gemini_temperature: float = Field(default=0.5, validation_alias="GEMINI_TEMPERATURE")
	gemini_top_k: int = Field(default=40, validation_alias="GEMINI_TOP_K")
	gemini_top_p: float = Field(default=0.9, validation_alias="GEMINI_TOP_P")
	gemini_max_output_tokens: int = Field(default=4096, validation_alias="GEMINI_MAX_OUTPUT_TOKENS")
	gemini_timeout_seconds: float = Field(default=60, validation_alias="GEMINI_TIMEOUT_SECONDS")

	# Where the generation pipeline reaches the AI proxy
	proxy_url: str = Field(default="http://localhost:8000/api/gemini", validation_alias="AI_PROXY_URL")
	proxy_timeout_seconds: float = Field(default=120, validation_alias="PROXY_TIMEOUT_SECONDS")
	fetch_timeout_seconds: float = Field(default=30, validation_alias="FETCH_TIMEOUT_SECONDS")

	# PDF text backends, tried in order until one imports
	pdf_backends: list[str] = Field(default=["pypdf", "pdfplumber", "fitz"], validation_alias="PDF_BACKENDS")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")
	generation_retention_days: int = Field(default=7, validation_alias="GENERATION_RETENTION_DAYS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
	cors_allow_origins: list[str] = Field(default=["*"], validation_alias="CORS_ALLOW_ORIGINS")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
