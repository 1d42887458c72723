"""
Генерация уникальных slug для политик в пределах организации.
"""

import logging
import re
from typing import Awaitable, Callable

from ....core.errors import SlugExhaustedError

logger = logging.getLogger("policy-service.domain.slug_generator")

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

MAX_SLUG_ATTEMPTS = 1000
FALLBACK_SLUG = "policy"


def slugify(title: str) -> str:
    """
    Построить базовый slug из заголовка.

    Пример:
        >>> slugify("Code of Conduct!")
        'code-of-conduct'
    """
    slug = _NON_ALNUM_RE.sub("-", title.lower()).strip("-")
    return slug or FALLBACK_SLUG


async def generate_unique_slug(
    title: str,
    slug_exists: Callable[[str], Awaitable[bool]],
    max_attempts: int = MAX_SLUG_ATTEMPTS,
) -> str:
    """
    Подобрать свободный slug: base, base-1, base-2, ...

    Args:
        title: Заголовок политики
        slug_exists: Проверка занятости slug (уже ограничена организацией
            и исключает обновляемую политику)
        max_attempts: Сколько кандидатов проверить до отказа

    Raises:
        SlugExhaustedError: Если все кандидаты заняты
    """
    base_slug = slugify(title)
    candidate = base_slug
    for attempt in range(max_attempts):
        if attempt:
            candidate = f"{base_slug}-{attempt}"
        if not await slug_exists(candidate):
            return candidate

    logger.error(f"Slug space exhausted for base '{base_slug}' after {max_attempts} attempts")
    raise SlugExhaustedError(base_slug, max_attempts)
