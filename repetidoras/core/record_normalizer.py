import re
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Union

from ..schema.models import NormalizedRecord, RawRepeaterRecord, RecordInfo
from .city_matcher import DEFAULT_THRESHOLDS, MatchThresholds, process_city_name
from .state_normalizer import normalize_state
from .text_normalizer import as_number, capitalize_words, parse_float, parse_int_prefix

COUNTRY_PATTERN = re.compile(r'bra(s|z)il', re.IGNORECASE)

NUMERIC_FIELDS = ('frequency', 'offset', 'color_code', 'id')

# Campos consumidos pela normalização (não vão para o registro final)
CONSUMED_FIELDS = ('state', 'country', 'status', 'city')

# origem -> chave dentro de info
INFO_FIELDS = {
    'id': 'dmr_id',
    'ipsc_network': 'ipsc',
    'assigned': 'assigned',
    'callsign': 'callsign',
    'trustee': 'trustee',
    'locator': 'locator',
    'map': 'map',
    'map_info': 'map_info',
}

RENAMED_FIELDS = {
    'frequency': 'rx',
    'color_code': 'color',
}


def convert_timeslot(ts_linked: Any) -> List[int]:
    """
    "TS1 TS2" -> [1, 2]. Valores não numéricos ou <= 0 são descartados.
    """
    if not ts_linked:
        return []
    tokens = re.sub(r'TS', '', str(ts_linked), flags=re.IGNORECASE).strip().split()
    slots = []
    for token in tokens:
        num = parse_int_prefix(token)
        if num is not None and num > 0:
            slots.append(num)
    return slots


def is_eligible(raw: Mapping[str, Any]) -> bool: ##     Apenas repetidoras ativas no Brasil
    country = str(raw.get('country') or '').strip()
    status = str(raw.get('status') or '').lower()
    return bool(COUNTRY_PATTERN.search(country)) and status == 'active'


def normalize_record(
        raw: Union[Mapping[str, Any], RawRepeaterRecord],
        city_counts: MutableMapping[str, int],
        city_index,
        thresholds: MatchThresholds = DEFAULT_THRESHOLDS
) -> Optional[Dict[str, Any]]:
    """
    Normaliza um registro cru de repetidora.

    ARGS:
        raw: registro do feed
        city_counts: contador "{uf}:{cidade}" compartilhado pelo lote (é mutado)
        city_index: objeto com load() -> lista de cidades normalizadas
        thresholds: limiares do inferidor de cidade

    RETURNS:
        {"state_code": ..., "record": NormalizedRecord} ou None se rejeitado
    """
    if isinstance(raw, RawRepeaterRecord):
        raw = raw.model_dump(exclude_unset=True)

    if not is_eligible(raw):
        return None

    state_code = normalize_state(raw.get('state'))
    if not state_code:
        return None

    city = process_city_name(raw.get('city'), state_code, city_index, thresholds)
    if not city:
        return None

    fields = {k: v for k, v in raw.items() if k not in CONSUMED_FIELDS}
    fields.pop('location', None)
    extra_info = fields.pop('info', None)

    for name in NUMERIC_FIELDS:
        if fields.get(name) is not None:
            fields[name] = as_number(parse_float(fields[name]))

    info: Dict[str, Any] = dict(extra_info) if isinstance(extra_info, Mapping) else {}
    for source, target in INFO_FIELDS.items():
        if source in fields:
            info[target] = fields.pop(source)

    for source, target in RENAMED_FIELDS.items():
        if source in fields:
            fields[target] = fields.pop(source)

    if 'ts_linked' in fields:
        fields['timeslot'] = convert_timeslot(fields.pop('ts_linked'))

    if fields.get('rx') is not None and fields.get('offset') is not None:
        fields['tx'] = as_number(round(fields['rx'] + fields['offset'], 5))

    # Índice de duplicata na ordem de chegada: 1ª ocorrência sem índice
    city_key = f"{state_code}:{city}"
    count = city_counts.get(city_key, 0) + 1
    location: List[Union[str, int]] = [state_code.upper(), city]
    if count > 1:
        location.append(count - 1)

    for key, value in fields.items():
        if isinstance(value, str):
            fields[key] = capitalize_words(value)

    record = NormalizedRecord(info=RecordInfo(**info), location=location, **fields)

    # Só conta depois que o registro foi construído
    city_counts[city_key] = count

    return {"state_code": state_code, "record": record}
