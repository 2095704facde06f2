# chatrelay/services/doctor.py

from typing import Any, Dict

from chatrelay.core.config import Settings
from chatrelay.core.errors import ConfigurationError
from chatrelay.services import prompts


def check_configuration(settings: Settings) -> None:
    """Raise ConfigurationError if the Lark credentials are unusable."""
    if not settings.LARK_APP_ID:
        raise ConfigurationError(prompts.DOCTOR_MISSING_APP_ID)
    if not settings.LARK_APP_ID.startswith("cli_"):
        raise ConfigurationError(prompts.DOCTOR_WRONG_APP_ID)
    if not settings.LARK_APP_SECRET:
        raise ConfigurationError(prompts.DOCTOR_MISSING_APP_SECRET)


def doctor(settings: Settings) -> Dict[str, Any]:
    """Self-check returned to whoever calls the webhook without an envelope"""
    try:
        check_configuration(settings)
    except ConfigurationError as e:
        return {"code": 1, "message": {"en_US": str(e)}}

    return {
        "code": 0,
        "message": prompts.DOCTOR_OK,
        "meta": {"LARK_APP_ID": settings.LARK_APP_ID},
    }
