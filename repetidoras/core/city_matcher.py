"""
Inferência do nome correto de uma cidade contra a base oficial de municípios.

Estratégias em cascata (a primeira que resolve vence):
exato -> prefixo -> substring -> palavras-chave -> similaridade -> original.
Casos ambíguos saem com "?" no final para revisão humana.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .city_cleaner import clean_city
from .text_normalizer import capitalize_words, collapse_punctuation, normalize_name

logger = logging.getLogger(__name__)

AMBIGUOUS_MARK = '?'

PRIORITY_CITIES = (
    'rio de janeiro',
    'sao paulo',
    'belo horizonte',
    'brasilia',
    'salvador',
    'fortaleza',
    'recife',
    'porto alegre',
    'curitiba',
    'manaus',
)


@dataclass(frozen=True)
class MatchThresholds:
    """Limiares empíricos da cascata de inferência."""
    similarity: float = 0.9
    prefix_ambiguity: int = 2
    substring_ambiguity: int = 3
    substring_max_length: int = 5

    @classmethod
    def from_settings(cls, settings) -> "MatchThresholds":
        return cls(
            similarity=settings.SIMILARITY_THRESHOLD,
            prefix_ambiguity=settings.PREFIX_AMBIGUITY_LIMIT,
            substring_ambiguity=settings.SUBSTRING_AMBIGUITY_LIMIT,
            substring_max_length=settings.SUBSTRING_AMBIGUITY_MAX_LENGTH,
        )


DEFAULT_THRESHOLDS = MatchThresholds()


def jaro_winkler(s1: str, s2: str) -> float:
    """
    Similaridade Jaro-Winkler conservadora (0.0 a 1.0).

    Strings com diferença de tamanho > 5 são descartadas com 0.0
    antes da varredura. Bônus de prefixo: 0.05 por caractere, até 3.
    """
    if s1 == s2:
        return 1.0

    if abs(len(s1) - len(s2)) > 5:
        return 0.0

    len1 = len(s1)
    len2 = len(s2)

    if len1 == 0 or len2 == 0:
        return 0.0

    match_distance = max(len1, len2) // 2 - 1
    s1_matches = [False] * len1
    s2_matches = [False] * len2

    matches = 0
    for i in range(len1):
        start = max(0, i - match_distance)
        end = min(i + match_distance + 1, len2)
        for j in range(start, end):
            if s2_matches[j] or s1[i] != s2[j]:
                continue
            s1_matches[i] = True
            s2_matches[j] = True
            matches += 1
            break

    if matches == 0:
        return 0.0

    transpositions = 0
    k = 0
    for i in range(len1):
        if not s1_matches[i]:
            continue
        while not s2_matches[k]:
            k += 1
        if s1[i] != s2[k]:
            transpositions += 1
        k += 1

    jaro = (matches / len1 + matches / len2 + (matches - transpositions / 2) / matches) / 3

    prefix = 0
    for i in range(min(3, len1, len2)):
        if s1[i] != s2[i]:
            break
        prefix += 1

    return jaro + prefix * 0.05 * (1 - jaro)


def _pick_prefix_match(matches: List[str]) -> str:
    for city in matches:
        if city in PRIORITY_CITIES:
            return city
    return matches[0]


def infer_city_name(
        original: str,
        cities: Optional[Sequence[str]],
        thresholds: MatchThresholds = DEFAULT_THRESHOLDS
) -> str:
    """
    Valida/corrige um nome de cidade já limpo.

    ARGS:
        original: nome limpo (sem UF/país no fim)
        cities: base de nomes minúsculos e sem acento
        thresholds: limiares de ambiguidade e similaridade

    RETURNS:
        nome capitalizado; termina em "?" quando a inferência é ambígua
    """
    if not original or not cities:
        return capitalize_words(original)

    normalized = normalize_name(original)

    # Estratégia 1: exato (mantém a grafia do original)
    if normalized in cities:
        return capitalize_words(original)

    # Estratégia 2: prefixo, só para nomes curtos
    if len(normalized.split(' ')) <= 2:
        prefix_matches = [c for c in cities if c.startswith(normalized)]

        if len(prefix_matches) == 1:
            return capitalize_words(prefix_matches[0])

        if len(prefix_matches) > thresholds.prefix_ambiguity:
            return capitalize_words(original) + AMBIGUOUS_MARK

        if prefix_matches:
            return capitalize_words(_pick_prefix_match(prefix_matches))

    # Estratégia 3: um contém o outro
    contains_matches = [c for c in cities if normalized in c or c in normalized]

    if len(contains_matches) == 1:
        return capitalize_words(contains_matches[0])

    if (len(contains_matches) > thresholds.substring_ambiguity
            and len(normalized) <= thresholds.substring_max_length):
        return capitalize_words(original) + AMBIGUOUS_MARK

    # Estratégia 4: palavras-chave de nomes compostos
    words = [w for w in normalized.split() if len(w) > 2]

    if len(words) > 1:
        compound_matches = [c for c in cities if all(w in c for w in words)]
        if len(compound_matches) == 1:
            return capitalize_words(compound_matches[0])

        first, last = words[0], words[-1]
        edge_matches = [c for c in cities if first in c and last in c]
        if len(edge_matches) == 1:
            return capitalize_words(edge_matches[0])

    # Estratégia 5: similaridade com limiar conservador
    best_match = None
    best_score = 0.0
    for city in cities:
        score = jaro_winkler(normalized, city)
        if score > best_score:
            best_score = score
            best_match = city

    if best_match is not None and best_score >= thresholds.similarity:
        return capitalize_words(best_match)

    # Estratégia 6: original
    return capitalize_words(original)


def process_city_name(
        city: Optional[str],
        state_code: str,
        city_index,
        thresholds: MatchThresholds = DEFAULT_THRESHOLDS
) -> str:
    """
    Limpa + valida o campo city de um registro.
    Nunca lança: falha ao carregar a base devolve o nome limpo capitalizado.
    """
    if not city:
        return ''

    cleaned = clean_city(city, state_code)

    if cleaned and len(cleaned) > 1:
        try:
            cities = city_index.load()
        except Exception:
            logger.exception("Erro na validação de cidade: %r", cleaned)
            return capitalize_words(cleaned)

        corrected = infer_city_name(cleaned, cities, thresholds)
        logger.debug('Cidade corrigida: "%s" -> "%s"', cleaned, corrected)
        return corrected

    return capitalize_words(collapse_punctuation(str(city)))
