from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List
from dotenv import load_dotenv


# Ensure .env is loaded eagerly
load_dotenv(dotenv_path=".env")


class Settings(BaseSettings):
	# Server
	host: str = "0.0.0.0"
	port: int = 8000
	cors_allow_origins: List[str] = [
		"http://localhost:3000",
		"http://localhost:5173",
		"http://127.0.0.1:3000",
		"http://127.0.0.1:5173",
	]

	# Auth
	api_key: str | None = None  # simple bearer key if provided

	# LLM Provider Selection
	llm_provider: str = "groq"  # options: groq, gemini

	# Groq
	groq_api_key: str | None = None
	groq_model: str = "llama-3.3-70b-versatile"
	answer_temperature: float = 0.7
	groq_max_tokens: int | None = None

	# Google Gemini
	gemini_api_key: str | None = None
	gemini_model: str = "models/gemini-2.0-flash-lite"

	# Storage
	data_dir: str = "data"

	# Logging
	log_level: str = "INFO"
	log_level_overrides: str | None = None  # e.g., interview_prep.utils.json_extract=DEBUG,groq=WARNING
	analytics_path: str | None = None  # e.g., logs/generation.jsonl
	json_preview_chars: int = 500

	@field_validator("answer_temperature")
	@classmethod
	def clamp_temperature(cls, v: float) -> float:
		return max(0.0, min(1.0, v))

	@field_validator("cors_allow_origins", mode="before")
	@classmethod
	def parse_cors_origins(cls, v):
		# Allow environment variable override
		if isinstance(v, str):
			return [origin.strip() for origin in v.split(",") if origin.strip()]
		return v

	class Config:
		env_file = ".env"
		env_file_encoding = "utf-8"


settings = Settings()
