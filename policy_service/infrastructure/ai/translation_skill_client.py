"""
AI-навык перевода через LLM Proxy (REST API).
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ...domain.interfaces import ITranslationSkill, SkillContext, SkillResult
from ...domain.policy_context.value_objects import get_language_name

logger = logging.getLogger("policy-service.infrastructure.translation_skill")

TRANSLATE_SKILL = "translate"

_FORMATTED_INSTRUCTIONS = (
    "Preserve the HTML structure exactly: keep every tag and attribute, "
    "translate only the human-readable text."
)
_PLAIN_INSTRUCTIONS = "Return plain text only, without quotes or markup."


class LLMTranslationSkill(ITranslationSkill):
    """
    Инкапсулирует вызов навыка перевода через LLM Proxy.

    Ошибки сети и неожиданный ответ прокси не выбрасываются наружу,
    а возвращаются как SkillResult(success=False, error=...).
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        model: str,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    async def execute_skill(
        self,
        skill_name: str,
        params: Dict[str, Any],
        context: SkillContext,
    ) -> SkillResult:
        if skill_name != TRANSLATE_SKILL:
            return SkillResult(success=False, error=f"Unknown skill: {skill_name}")

        messages = self._build_messages(
            content=params.get("content", ""),
            target_language=params.get("targetLanguage", ""),
            preserve_formatting=bool(params.get("preserveFormatting", False)),
        )
        payload = {"model": self.model, "messages": messages, "stream": False}

        logger.info(
            f"[LLMTranslationSkill] POST {self.api_url}/v1/chat/completions "
            f"entity={context.entity_type}:{context.entity_id} lang={params.get('targetLanguage')}"
        )

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    f"{self.api_url}/v1/chat/completions",
                    json=payload,
                    headers={
                        "X-Internal-Auth": self.api_key,
                        "X-Organization-Id": context.organization_id,
                    },
                    timeout=self.timeout,
                )
            response.raise_for_status()
            body = response.json()
            translated = body["choices"][0]["message"]["content"]
        except httpx.HTTPStatusError as e:
            logger.error(f"[LLMTranslationSkill] Proxy returned {e.response.status_code}: {e}")
            return SkillResult(success=False, error=f"LLM proxy error {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"[LLMTranslationSkill] Request failed: {e}", exc_info=True)
            return SkillResult(success=False, error=str(e) or e.__class__.__name__)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"[LLMTranslationSkill] Unexpected proxy response: {e}", exc_info=True)
            return SkillResult(success=False, error="Malformed response from LLM proxy")

        if not isinstance(translated, str) or not translated.strip():
            return SkillResult(success=False, error="Empty translation returned")

        return SkillResult(
            success=True,
            data={"translated": translated.strip()},
            metadata={"model": body.get("model", self.model)},
        )

    @staticmethod
    def _build_messages(content: str, target_language: str, preserve_formatting: bool) -> List[dict]:
        language = get_language_name(target_language)
        instructions = _FORMATTED_INSTRUCTIONS if preserve_formatting else _PLAIN_INSTRUCTIONS
        return [
            {
                "role": "system",
                "content": (
                    f"You are a professional translator of corporate compliance policies. "
                    f"Translate the user's text into {language} ({target_language}). {instructions}"
                ),
            },
            {"role": "user", "content": content},
        ]
