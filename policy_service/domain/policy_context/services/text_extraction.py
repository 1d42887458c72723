"""
Извлечение plain text из HTML-контента политики.

Одна и та же функция используется при публикации версии и при
сохранении перевода, чтобы поисковый текст совпадал.
"""

import re
from typing import Optional

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

# Порядок важен: &amp; декодируется до &lt;/&gt;, как в исходных данных
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def extract_plain_text(html: str) -> str:
    """
    Удалить теги, декодировать основные HTML-сущности и схлопнуть пробелы.

    Пример:
        >>> extract_plain_text("<h1>A &amp; B</h1><p>  x  y </p>")
        'A & B x y'
    """
    text = _TAG_RE.sub(" ", html)
    for entity, replacement in _ENTITIES:
        text = text.replace(entity, replacement)
    return _WHITESPACE_RE.sub(" ", text).strip()


def has_content(content: Optional[str]) -> bool:
    """Черновик считается пустым, если он отсутствует или состоит из пробелов."""
    return bool(content and content.strip())
