"""External collaborator interfaces used by the rendering engine."""

from .lib import (
    ADD_BUTTON_CLASS,
    REMOVE_BUTTON_CLASS,
    REPEAT_ACTIONS_CLASS,
    REPEAT_WRAPPER_CLASS,
    Captcha,
    CaptchaConfig,
    CaptchaFactory,
    DefaultRepeatableGroup,
    EnrichmentHook,
    RepeatableGroup,
    RuleEngine,
    SubmitHandler,
    captcha_page_name,
    extract_id_from_url,
    get_site_page_name,
    noop_enrich,
)

__all__ = [
    "REPEAT_ACTIONS_CLASS",
    "ADD_BUTTON_CLASS",
    "REMOVE_BUTTON_CLASS",
    "REPEAT_WRAPPER_CLASS",
    "EnrichmentHook",
    "RepeatableGroup",
    "Captcha",
    "RuleEngine",
    "CaptchaFactory",
    "SubmitHandler",
    "noop_enrich",
    "DefaultRepeatableGroup",
    "CaptchaConfig",
    "extract_id_from_url",
    "get_site_page_name",
    "captcha_page_name",
]
