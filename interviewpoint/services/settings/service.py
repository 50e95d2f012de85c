from __future__ import annotations

import logging
from typing import List

from interviewpoint.services.storage import SETTINGS_KEY, StorageService

from .schema import AppSettings, FeedbackOption, QuestionType, default_settings, standard_options

logger = logging.getLogger(__name__)


class SettingsService:
    """Global feedback scales for direct and indirect questions."""

    def __init__(self, storage: StorageService) -> None:
        self._storage = storage

    def get(self) -> AppSettings:
        stored = self._storage.get(SETTINGS_KEY)
        if stored is None:
            return default_settings()
        return AppSettings.model_validate(stored)

    def save(self, settings: AppSettings) -> AppSettings:
        self._storage.put(SETTINGS_KEY, settings.to_document())
        logger.info("feedback settings saved")
        return settings

    def reset(self) -> AppSettings:
        logger.info("feedback settings reset to defaults")
        return self.save(default_settings())

    def options_for(self, question_type: QuestionType) -> List[FeedbackOption]:
        return standard_options(self.get(), question_type)


__all__ = ["SettingsService"]
