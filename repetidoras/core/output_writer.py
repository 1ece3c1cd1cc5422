"""
Gravação dos resultados por UF (JSON + CSV).

Resolução de caminhos e escrita em disco ficam aqui; o pipeline só
conhece o contrato save(records, paths, state, format).
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from ..models.rt4d import DEFAULT_ALIAS_TEMPLATE, convert_to_model
from ..schema.models import NormalizedRecord
from .text_normalizer import format_number

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ('json', 'csv')


def resolve_paths(base_dir: Union[str, Path], state_code: str = '') -> Dict[str, Any]:
    """
    Caminhos de saída de uma UF: <base>/uf/<uf>/<uf>.json|.csv.
    Sem UF, aponta para <base>/dados.*
    """
    base = Path(base_dir)
    state_code = (state_code or '').strip().lower()
    if state_code:
        folder = base / 'uf' / state_code
        stem = state_code
    else:
        folder = base
        stem = 'dados'
    return {
        'json': folder / f'{stem}.json',
        'csv': folder / f'{stem}.csv',
        'base': folder,
        'state': state_code,
    }


def normalize_destination(destination: Union[str, Path, None], fmt: str) -> Path: ##     Diretório -> dados.<ext>; extensão errada é trocada
    expected = '.csv' if fmt == 'csv' else '.json'
    text = str(destination or '').rstrip('/\\')
    if not text:
        return Path(f'dados{expected}')

    path = Path(text)
    if path.is_dir() or not path.suffix:
        return path / f'dados{expected}'
    if path.suffix.lower() != expected:
        return path.with_suffix(expected)
    return path


def _as_dict(record: Any) -> Any:
    if isinstance(record, NormalizedRecord):
        return record.to_json()
    return record


def records_to_csv(records: Sequence[Any], header: Optional[Sequence[str]] = None, sep: str = ';') -> str:
    """
    Achata registros (info.* vira coluna própria) em CSV.
    Listas viram "a,b"; dicionários restantes viram JSON.
    """
    rows = [d for d in map(_as_dict, records) if isinstance(d, Mapping)]
    if not rows:
        return ''

    prepared = []
    for row in rows:
        prepared.append({
            k: ','.join(str(x) for x in v) if isinstance(v, list) else v
            for k, v in row.items()
        })

    df = pd.json_normalize(prepared)
    df = df.apply(lambda col: col.map(lambda v: json.dumps(v, ensure_ascii=False) if isinstance(v, (dict, list)) else v))

    return df.to_csv(
        sep=sep,
        index=False,
        header=list(header) if header is not None else True,
        float_format=lambda v: format_number(v),
        lineterminator='\n',
    )


def _prepare_content(records: Any, fmt: str, state_code: str, header: Optional[Sequence[str]]) -> str:
    if isinstance(records, str):
        return records

    if fmt == 'json':
        if isinstance(records, (list, tuple)):
            payload = [_as_dict(r) for r in records]
            if state_code:
                payload = {state_code: payload}
        elif isinstance(records, Mapping):
            payload = {k: [_as_dict(r) for r in v] if isinstance(v, list) else _as_dict(v) for k, v in records.items()}
        else:
            raise ValueError("Tipo de 'registros' inválido.")
        return json.dumps(payload, ensure_ascii=False, separators=(',', ':'))

    if isinstance(records, Mapping):
        records = [records]
    if not isinstance(records, (list, tuple)):
        raise ValueError("Tipo de 'registros' inválido.")
    return records_to_csv(records, header)


def save(
        records: Any,
        paths: Union[str, Path, Mapping[str, Any]],
        state_code: str = '',
        fmt: str = 'json',
        header: Optional[Sequence[str]] = None
) -> str:
    """
    Grava registros em JSON ou CSV e retorna o caminho final.

    ARGS:
        records: lista de registros, mapa UF -> registros ou texto pronto
        paths: destino (arquivo/diretório) ou o dict de resolve_paths
        state_code: UF usada como chave do JSON
        fmt: 'json' ou 'csv'
        header: cabeçalho explícito para o CSV
    """
    fmt = str(fmt or 'json').strip().lower()
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Formato '{fmt}' não suportado.")

    if isinstance(paths, Mapping):
        destination = paths.get(fmt) or paths.get('json')
    else:
        destination = paths

    final_path = normalize_destination(destination, fmt)
    content = _prepare_content(records, fmt, state_code, header)

    final_path.parent.mkdir(parents=True, exist_ok=True)
    final_path.write_text(content, encoding='utf-8')
    logger.debug("Arquivo gravado: %s", final_path)
    return str(final_path)


class FileSystemSink:
    """
    Saver padrão do lote: por UF grava o JSON normalizado e o CSV
    do modelo de rádio; ao final, um CSV achatado com todas as UFs.
    """

    def __init__(
            self,
            output_dir: Union[str, Path],
            delimiter: str = ',',
            alias_template: str = DEFAULT_ALIAS_TEMPLATE,
            combined_name: str = 'radioidnet.csv'
    ):
        self.output_dir = Path(output_dir)
        self.delimiter = delimiter
        self.alias_template = alias_template
        self.combined_name = combined_name

    def resolve(self, state_code: str) -> Dict[str, Any]:
        return resolve_paths(self.output_dir, state_code)

    def __call__(self, records: List[NormalizedRecord], paths: Mapping[str, Any], state_code: str) -> List[str]:
        json_path = save(records, paths, state_code, 'json')
        model_csv = convert_to_model(
            [r.to_json() for r in records],
            to_csv=True,
            template=self.alias_template,
            delimiter=self.delimiter,
        )
        csv_path = save(model_csv, paths, state_code, 'csv')
        return [json_path, csv_path]

    def save_combined(self, contents: Mapping[str, List[NormalizedRecord]]) -> str:
        all_records = [r for records in contents.values() for r in records]
        return save(all_records, self.output_dir / self.combined_name, fmt='csv')
