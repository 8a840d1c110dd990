import os
from typing import Dict, Any

class Config:
	"""Configuration for the monorepo utilities."""

	# GitHub Configuration
	GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip('/')
	GITHUB_HOST = os.getenv("GITHUB_HOST", "github.com")
	GITHUB_TOKEN = os.getenv("GITHUB_TOKEN") or os.getenv("GITHUB_PAT")
	HTTP_TIMEOUT_S = int(os.getenv("HTTP_TIMEOUT_S", "30"))
	HTTP_MAX_RETRIES = int(os.getenv("HTTP_MAX_RETRIES", "3"))

	# Target repository defaults
	DEFAULT_OWNER = os.getenv("MONOREPO_OWNER", "woocommerce")
	DEFAULT_NAME = os.getenv("MONOREPO_NAME", "woocommerce")

	# Executables
	GIT_BIN = os.getenv("GIT_BIN", "git")
	PNPM_BIN = os.getenv("PNPM_BIN", "pnpm")

	# Monorepo layout
	WORKSPACE_FILE = os.getenv("WORKSPACE_FILE", "pnpm-workspace.yaml")
	CHANGELOG_DIR = os.getenv("CHANGELOG_DIR", "changelog")

	# Commit step
	BOT_GIT_NAME = os.getenv("BOT_GIT_NAME", "github-actions")
	BOT_GIT_EMAIL = os.getenv("BOT_GIT_EMAIL", "github-actions@github.com")
	COMMIT_MESSAGE = os.getenv("COMMIT_MESSAGE", "Adding changelog from automation.")

	# Code freeze cadence
	DAYS_BETWEEN_CODE_FREEZE_AND_RELEASE = int(os.getenv("DAYS_BETWEEN_CODE_FREEZE_AND_RELEASE", "22"))

	# Observability
	METRICS_ROOT = os.getenv("METRICS_ROOT", ".cache/monorepo_utils/metrics")
	METRICS_ENABLED = bool(int(os.getenv("METRICS_ENABLED", "0")))

	@classmethod
	def is_github_ci(cls) -> bool:
		"""True when running inside a GitHub Actions job."""
		return os.getenv("CI") == "true" and os.getenv("GITHUB_ACTIONS") == "true"

	@classmethod
	def get_github_config(cls) -> Dict[str, Any]:
		"""Get GitHub configuration for the REST client and clone URLs."""
		return {
			"api_url": cls.GITHUB_API_URL,
			"host": cls.GITHUB_HOST,
			"token": cls.GITHUB_TOKEN,
			"timeout_s": cls.HTTP_TIMEOUT_S,
			"max_retries": cls.HTTP_MAX_RETRIES,
		}

	@classmethod
	def get_bot_identity_config(cls) -> Dict[str, str]:
		"""Get the git identity used for automation commits in CI."""
		return {
			"name": cls.BOT_GIT_NAME,
			"email": cls.BOT_GIT_EMAIL,
		}

	@classmethod
	def observability(cls) -> Dict[str, Any]:
		return {
			"metrics_root": cls.METRICS_ROOT,
			"metrics_enabled": cls.METRICS_ENABLED,
		}
