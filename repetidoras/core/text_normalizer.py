import re
import unicodedata
from typing import Any, Optional, Union

# Separadores tratados como ruído em nomes de cidade
PUNCT_CHARS = r'\-./,|'

NUMBER_PREFIX = re.compile(r'\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')
INT_PREFIX = re.compile(r'\s*([+-]?\d+)')


def strip_accents(text: str) -> str: ##     Decomposição canônica (NFD) + remoção de marcas combinantes
    decomposed = unicodedata.normalize('NFD', text)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_name(text: Optional[str]) -> str: ##     Chave de comparação: minúsculo, sem acento, sem espaços nas pontas
    if not text:
        return ''
    return strip_accents(str(text).lower()).strip()


def capitalize_words(text: Any) -> Any:
    """
    Capitaliza cada palavra separada por espaço simples.
    Valores que não são string retornam inalterados.
    """
    if not isinstance(text, str):
        return text
    return ' '.join(word[:1].upper() + word[1:] for word in text.lower().split(' '))


def collapse_punctuation(text: str) -> str: ##     Troca sequências de pontuação por espaço e colapsa espaços
    text = re.sub(f'[{PUNCT_CHARS}]+', ' ', text)
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def parse_float(value: Any) -> float:
    """
    Conversão tolerante no estilo parseFloat: usa o prefixo numérico
    da string e devolve 0 quando não há número (ou quando ele é 0/NaN).
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value) if value == value else 0.0
    m = NUMBER_PREFIX.match(str(value))
    if not m:
        return 0.0
    try:
        return float(m.group(1))
    except ValueError:
        return 0.0


def parse_int_prefix(value: str) -> Optional[int]:
    m = INT_PREFIX.match(value)
    return int(m.group(1)) if m else None


def as_number(value: float) -> Union[int, float]: ##     Inteiros saem sem ".0" no JSON
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def format_number(value: Any) -> str:
    """Texto de um valor para colunas de ID: 123.0 -> '123', None -> ''."""
    if value is None:
        return ''
    if isinstance(value, float):
        return str(as_number(value))
    return str(value)
