"""
Modelo de programação de canais do rádio RT4D.

Converte registros normalizados em linhas de colunas fixas (cabeçalho + dados)
e serializa em texto delimitado. Ajustes que não vêm dos dados (modo, potência,
TOT, etc.) são constantes do modelo.
"""
import json
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..schema.models import NormalizedRecord
from ..core.text_normalizer import format_number

DEFAULT_ALIAS_TEMPLATE = '{{$AD}} {{$UF}} {{$CITY}}{{[ {{$COUNT}}]}}'

# [analógico, digital]
AD_CONFIG = ('A', 'D')

MODEL = [
    'CH',
    'RX Freq',
    'TX Freq',
    'CH Mode',
    'RX/TX Limit',
    'TX Power',
    'TOT',
    'Scan Add',
    'CH Alias',
    'ID Type',
    'CH ID',
    'Dual Slot',
    'Time Slot',
    'Color Code',
    'Promiscuous',
    'TX Politely',
    'TX Contacts',
    'RX TG List',
    'DMR Encryption',
    'RX CTC DCS',
    'TX CTC DCS',
    'CTC DCS Type',
    'Mute Code',
    'Busy Lock',
    'Demodulation',
    'Tail Tone',
    'Scrambler',
    'Bandwidth',
    'Offset',
]

FIELD_PATTERN = re.compile(r'\{\{\$([A-Z_]+)\}\}')
OPTIONAL_PATTERN = re.compile(r'\{\{\[(.*?)\]\}\}', re.DOTALL)


def format_frequency(freq: Any) -> str: ##     MHz com 5 casas
    if isinstance(freq, bool) or not isinstance(freq, (int, float)) or math.isnan(freq):
        return '0.00000'
    return f'{freq:.5f}'


def quote_if_not_numeric(value: Any) -> str:
    """
    Valores com cara de número saem crus, o resto entre aspas duplas.
    String vazia conta como numérica (mesma regra de isNaN/isFinite).
    """
    text = str(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return text if math.isfinite(value) else f'"{text}"'
    stripped = text.strip()
    if stripped == '':
        return text
    if '_' in stripped:
        return f'"{text}"'
    try:
        number = float(stripped)
    except ValueError:
        return f'"{text}"'
    return text if math.isfinite(number) else f'"{text}"'


def resolve_timeslots(record: Mapping[str, Any]) -> List[int]:
    timeslot = record.get('timeslot')
    if isinstance(timeslot, list):
        return timeslot

    # Fallback para ts_linked
    ts_linked = record.get('ts_linked')
    if ts_linked:
        if isinstance(ts_linked, str):
            return [1, 2] if '2' in ts_linked else [1]
        if isinstance(ts_linked, list):
            return ts_linked

    return [1]


def channel_mode_flag(record: Mapping[str, Any]) -> str:
    """D quando há timeslot e color code válidos, senão A."""
    timeslot = record.get('timeslot')
    has_timeslot = isinstance(timeslot, list) and len(timeslot) > 0
    color = record.get('color')
    has_color = color is not None and color not in (0, '0')
    return AD_CONFIG[1] if has_timeslot and has_color else AD_CONFIG[0]


def build_channel_alias(location: Sequence[Any], ad_value: str, template: str = DEFAULT_ALIAS_TEMPLATE) -> str:
    """
    Substitui {{$CAMPO}} no template. Blocos {{[ ... ]}} somem quando
    algum campo dentro deles está vazio.
    """
    if not isinstance(location, (list, tuple)) or len(location) < 2:
        return 'Unknown'

    uf, city = location[0], location[1]
    count = location[2] if len(location) > 2 else None
    values = {
        'UF': uf or 'XX',
        'CITY': city or 'Unknown',
        'COUNT': '' if count is None or count == '' else str(count),
        'AD': ad_value or AD_CONFIG[0],
    }

    def _optional(match):
        content = match.group(1)
        fields = FIELD_PATTERN.findall(content)
        if any(values.get(f) == '' for f in fields):
            return ''
        return content

    alias = OPTIONAL_PATTERN.sub(_optional, template)
    alias = FIELD_PATTERN.sub(lambda m: str(values.get(m.group(1), m.group(0))), alias)

    return re.sub(r'\s+', ' ', alias).strip()


def convert_record(record: Mapping[str, Any], ch_number: int, template: str = DEFAULT_ALIAS_TEMPLATE) -> List[Any]:
    timeslots = resolve_timeslots(record)
    has_timeslot2 = 2 in timeslots

    location = list(record.get('location') or ['XX', 'Unknown'])
    alias = build_channel_alias(location, channel_mode_flag(record), template)

    rx = record.get('rx') or 0
    tx = record.get('tx') or 0
    offset = record.get('offset') or (tx - rx)
    info = record.get('info') or {}

    return [
        ch_number,
        format_frequency(rx),
        format_frequency(tx),
        'Digital',      # CH Mode
        'RX+TX',        # RX/TX Limit
        'High',         # TX Power
        60,             # TOT
        'Add',          # Scan Add
        alias,
        'Channel ID',   # ID Type
        format_number(info.get('dmr_id') or record.get('id') or ''),
        'On' if has_timeslot2 else 'Off',
        (timeslots[0] if timeslots else 0) or 1,
        format_number(record.get('color_code') or record.get('color') or '1'),
        'Off',          # Promiscuous
        'Allow TX',     # TX Politely
        'All Call',     # TX Contacts
        'None',         # RX TG List
        'None',         # DMR Encryption
        'None',         # RX CTC DCS
        'None',         # TX CTC DCS
        'Normal',       # CTC DCS Type
        0,              # Mute Code
        'Allow TX',     # Busy Lock
        'FM',           # Demodulation
        'Off',          # Tail Tone
        'Off',          # Scrambler
        'Wide',         # Bandwidth
        format_frequency(offset),
    ]


def _as_mapping(record: Union[Mapping[str, Any], NormalizedRecord]) -> Mapping[str, Any]:
    if isinstance(record, NormalizedRecord):
        return record.to_json()
    return record


def json_to_model(records: Sequence[Any], template: str = DEFAULT_ALIAS_TEMPLATE) -> List[List[Any]]:
    if not isinstance(records, (list, tuple)):
        raise ValueError('Registros deve ser um array')

    rows: List[List[Any]] = [list(MODEL)]
    for index, record in enumerate(records, start=1):
        rows.append(convert_record(_as_mapping(record), index, template))
    return rows


def model_to_csv(rows: Sequence[Sequence[Any]], delimiter: str = ',') -> str:
    if not rows:
        raise ValueError('Dados do modelo devem ser um array não vazio')
    return '\n'.join(delimiter.join(quote_if_not_numeric(col) for col in row) for row in rows)


def convert_to_model(
        data: Union[str, Sequence[Any]],
        to_csv: bool = False,
        template: str = DEFAULT_ALIAS_TEMPLATE,
        delimiter: str = ','
) -> Union[List[List[Any]], str]:
    """
    Converte JSON (lista ou string) para o modelo RT4D.

    RETURNS:
        linhas (cabeçalho + dados) ou CSV quando to_csv=True
    """
    if isinstance(data, str):
        try:
            records = json.loads(data)
        except json.JSONDecodeError as e:
            raise ValueError(f'Erro ao parsear JSON: {e}')
    elif isinstance(data, (list, tuple)):
        records = data
    else:
        raise ValueError('Dados devem ser array JSON ou string JSON')

    rows = json_to_model(records, template)
    return model_to_csv(rows, delimiter) if to_csv else rows


# Registro de modelos disponíveis para exportação
MODELS: Dict[str, Dict[str, Any]] = {
    'rt4d': {'name': 'rt4d', 'columns': MODEL, 'convert': convert_to_model},
}


def get_model(name: str) -> Optional[Dict[str, Any]]:
    return MODELS.get((name or '').strip().lower())
