from typing import Dict, List, Optional

from .text_normalizer import normalize_name

# Nomes completos (com e sem acento) e siglas -> sigla
# A ordem importa: o primeiro nome de cada sigla é o usado pela limpeza de cidade
STATES_MAP: Dict[str, str] = {
    'acre': 'ac',
    'alagoas': 'al',
    'amapa': 'ap',
    'amapá': 'ap',
    'amazonas': 'am',
    'bahia': 'ba',
    'ceara': 'ce',
    'ceará': 'ce',
    'distrito federal': 'df',
    'espirito santo': 'es',
    'espírito santo': 'es',
    'goias': 'go',
    'goiás': 'go',
    'maranhao': 'ma',
    'maranhão': 'ma',
    'mato grosso': 'mt',
    'mato grosso do sul': 'ms',
    'minas gerais': 'mg',
    'para': 'pa',
    'pará': 'pa',
    'paraiba': 'pb',
    'paraíba': 'pb',
    'parana': 'pr',
    'paraná': 'pr',
    'pernambuco': 'pe',
    'piaui': 'pi',
    'piauí': 'pi',
    'rio de janeiro': 'rj',
    'rio grande do norte': 'rn',
    'rio grande do sul': 'rs',
    'rondonia': 'ro',
    'rondônia': 'ro',
    'roraima': 'rr',
    'santa catarina': 'sc',
    'sao paulo': 'sp',
    'são paulo': 'sp',
    'sergipe': 'se',
    'tocantins': 'to',
    # Siglas
    'ac': 'ac',
    'al': 'al',
    'ap': 'ap',
    'am': 'am',
    'ba': 'ba',
    'ce': 'ce',
    'df': 'df',
    'es': 'es',
    'go': 'go',
    'ma': 'ma',
    'mt': 'mt',
    'ms': 'ms',
    'mg': 'mg',
    'pa': 'pa',
    'pb': 'pb',
    'pr': 'pr',
    'pe': 'pe',
    'pi': 'pi',
    'rj': 'rj',
    'rn': 'rn',
    'rs': 'rs',
    'ro': 'ro',
    'rr': 'rr',
    'sc': 'sc',
    'sp': 'sp',
    'se': 'se',
    'to': 'to',
}

STATE_CODES = frozenset(STATES_MAP.values())


def normalize_state(state: Optional[str]) -> str:
    """
    Converte nome ou sigla de UF para a sigla minúscula.
    Busca exata, sem fuzzy. Retorna '' quando não reconhece.
    """
    if not state:
        return ''
    return STATES_MAP.get(normalize_name(state), '')


def state_full_name(code: str) -> Optional[str]:
    """Primeira chave da tabela que aponta para a sigla (nome por extenso)."""
    for key, value in STATES_MAP.items():
        if value == code:
            return key
    return None


def state_patterns() -> List[str]: ##     Tudo que pode aparecer como qualificador no fim de uma cidade
    return list(STATES_MAP.keys()) + ['brazil', 'brasil']
