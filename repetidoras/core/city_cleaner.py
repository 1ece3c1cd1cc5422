import re
from typing import Optional

from .state_normalizer import state_full_name, state_patterns
from .text_normalizer import PUNCT_CHARS

SEPARATOR_CLASS = r'[\-\s/,.]'


def _strip_trailing(text: str, pattern: str) -> str: ##     Remove o qualificador só quando ancorado no fim e precedido de separador
    regex = re.compile(
        f'{SEPARATOR_CLASS}+{re.escape(pattern)}{SEPARATOR_CLASS}*$',
        re.IGNORECASE,
    )
    return regex.sub('', text)


def clean_city(city: Optional[str], state_code: str = '') -> str:
    """
    Limpa o nome cru de uma cidade.

    1. Remove palavras do nome da UF informada no fim da string
    2. Remove qualquer outro nome/sigla de UF e "brasil"/"brazil" no fim
    3. Tira pontuação das pontas e troca a interna por espaço

    Heurística de melhor esforço: qualificadores no início ou no meio
    permanecem ("SP Campinas" continua "SP Campinas").
    """
    if not city:
        return ''
    cleaned = str(city)

    if state_code:
        full_name = state_full_name(state_code)
        if full_name:
            for word in full_name.split(' '):
                cleaned = _strip_trailing(cleaned, word)

    for pattern in state_patterns():
        cleaned = _strip_trailing(cleaned, pattern)

    cleaned = re.sub(f'[{PUNCT_CHARS}\\s]+$', '', cleaned)
    cleaned = re.sub(f'^[{PUNCT_CHARS}\\s]+', '', cleaned)
    cleaned = re.sub(f'[{PUNCT_CHARS}]+', ' ', cleaned)
    cleaned = re.sub(r'\s+', ' ', cleaned)

    return cleaned.strip()
