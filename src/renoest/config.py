from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Mapping, Optional

LOGGER = logging.getLogger(__name__)

_BOOLEAN_TRUE = {"1", "true", "yes", "on"}

DEFAULT_STATE_FILE = Path("~/.renoest/current_project.json")
DEFAULT_OUTPUT_DIR = Path("outputs")
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_SCOPE_MODEL = "gpt-4o"


@dataclass(frozen=True)
class AIConfig:
    """Settings for the scope, address and pricing assistants."""

    enabled: bool = True
    api_key_env: str = "OPENAI_API_KEY"
    api_key_path: Optional[Path] = None
    model: str = DEFAULT_MODEL
    scope_model: str = DEFAULT_SCOPE_MODEL
    web_search: bool = False

    def resolve_api_key(self) -> Optional[str]:
        """Return the API key from the environment or configured file."""
        if self.api_key_env and self.api_key_env in os.environ:
            token = os.environ[self.api_key_env].strip()
            if token:
                return token
        if self.api_key_path:
            try:
                content = Path(self.api_key_path).expanduser().read_text(encoding="utf-8")
            except FileNotFoundError:
                return None
            except OSError:
                LOGGER.debug("Unable to read AI API key from %s", self.api_key_path)
                return None
            for line in content.splitlines():
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" in line:
                    _, line = line.split("=", 1)
                token = line.strip()
                if token:
                    return token
        return None


@dataclass(frozen=True)
class Config:
    """Runtime configuration assembled from environment variables and CLI options."""

    state_file: Path
    output_dir: Path
    default_contingency_pct: float
    default_tax_pct: float
    default_discount_pct: float
    ai: AIConfig
    verbose: bool = False


def _to_path(value: object | None) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value.expanduser().resolve()
    text = str(value).strip()
    if not text:
        return None
    return Path(text).expanduser().resolve()


def _to_float(value: object | None) -> Optional[float]:
    if value is None:
        return None
    text = str(value).replace("%", "").strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _flag(value: object | None) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _BOOLEAN_TRUE


def _namespace(cli_args: object | None) -> SimpleNamespace:
    if cli_args is None:
        return SimpleNamespace()
    if isinstance(cli_args, SimpleNamespace):
        return cli_args
    if hasattr(cli_args, "__dict__"):
        return SimpleNamespace(**{k: v for k, v in vars(cli_args).items()})
    return SimpleNamespace()


def _or_default(value: Optional[float], default: float) -> float:
    return default if value is None else value


def load_config(env: Mapping[str, str], cli_args: object | None = None) -> Config:
    """Build a runtime :class:`Config` from environment variables and CLI options."""

    state_file = _to_path(env.get("RENOEST_STATE_FILE")) or _to_path(DEFAULT_STATE_FILE)
    output_dir = _to_path(env.get("RENOEST_OUTPUT_DIR")) or _to_path(DEFAULT_OUTPUT_DIR)
    contingency = _or_default(_to_float(env.get("RENOEST_DEFAULT_CONTINGENCY")), 10.0)
    tax = _or_default(_to_float(env.get("RENOEST_DEFAULT_TAX")), 0.0)
    discount = _or_default(_to_float(env.get("RENOEST_DEFAULT_DISCOUNT")), 0.0)
    disable_ai = _flag(env.get("DISABLE_OPENAI"))
    model = (env.get("RENOEST_AI_MODEL") or "").strip() or DEFAULT_MODEL
    scope_model = (env.get("RENOEST_SCOPE_MODEL") or "").strip() or DEFAULT_SCOPE_MODEL
    web_search = _flag(env.get("RENOEST_AI_WEB_SEARCH"))
    api_key_path = _to_path(env.get("OPENAI_API_KEY_FILE"))
    verbose = False

    cli_ns = _namespace(cli_args)
    if getattr(cli_ns, "state_file", None):
        state_file = _to_path(cli_ns.state_file) or state_file
    if getattr(cli_ns, "output_dir", None):
        output_dir = _to_path(cli_ns.output_dir) or output_dir
    if getattr(cli_ns, "disable_ai", False):
        disable_ai = True
    if getattr(cli_ns, "model", None):
        model = str(cli_ns.model)
    if getattr(cli_ns, "verbose", False):
        verbose = bool(cli_ns.verbose)

    return Config(
        state_file=state_file,
        output_dir=output_dir,
        default_contingency_pct=contingency,
        default_tax_pct=tax,
        default_discount_pct=discount,
        ai=AIConfig(
            enabled=not disable_ai,
            api_key_path=api_key_path,
            model=model,
            scope_model=scope_model,
            web_search=web_search,
        ),
        verbose=verbose,
    )


__all__ = ["AIConfig", "Config", "load_config"]
