from .translation_skill_client import LLMTranslationSkill, TRANSLATE_SKILL

__all__ = ["LLMTranslationSkill", "TRANSLATE_SKILL"]
