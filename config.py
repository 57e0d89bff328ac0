from __future__ import annotations
import logging
import os
from typing import Mapping, Optional
from pydantic import BaseModel, Field


APP_NAME = "StudyPlanner"


class AppConfig(BaseModel):
    gemini_api_key: Optional[str] = None
    model: str = "gemini-2.5-flash"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    log_level: str = "INFO"
    notification_limit: int = Field(default=50, ge=1, le=500)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """
        Build the config from environment variables. Unset variables fall
        back to the model defaults.
        """
        env = os.environ if environ is None else environ
        values = {
            "gemini_api_key": env.get("GEMINI_API_KEY") or env.get("GOOGLE_API_KEY"),
            "model": env.get("STUDY_PLANNER_MODEL"),
            "temperature": env.get("STUDY_PLANNER_TEMPERATURE"),
            "log_level": env.get("STUDY_PLANNER_LOG_LEVEL"),
            "notification_limit": env.get("STUDY_PLANNER_NOTIFICATION_LIMIT"),
        }
        return cls.model_validate({k: v for k, v in values.items() if v not in (None, "")})


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level.upper())
        return
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
