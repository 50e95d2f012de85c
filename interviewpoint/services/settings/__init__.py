from .schema import AppSettings, DirectFeedback, FeedbackOption, FeedbackSetting, IndirectFeedback, default_settings
from .service import SettingsService

__all__ = [
    "AppSettings",
    "DirectFeedback",
    "FeedbackOption",
    "FeedbackSetting",
    "IndirectFeedback",
    "SettingsService",
    "default_settings",
]
