"""
Contrato do modelo RT4D: colunas fixas, formatação de frequência,
alias do canal e serialização CSV.
"""
import json

import pytest

from repetidoras.models.rt4d import (
    MODEL,
    build_channel_alias,
    channel_mode_flag,
    convert_record,
    convert_to_model,
    format_frequency,
    get_model,
    json_to_model,
    model_to_csv,
    quote_if_not_numeric,
)
from repetidoras.schema.models import NormalizedRecord, RecordInfo

pytestmark = pytest.mark.contract


@pytest.fixture
def registro_sp():
    return {
        "rx": 145,
        "tx": 145.6,
        "offset": 0.6,
        "color": 1,
        "timeslot": [1],
        "info": {"dmr_id": 724001, "callsign": "PY2ABC"},
        "location": ["SP", "Sao Paulo"],
    }


def _as_columns(row):
    return dict(zip(MODEL, row))


def test_modelo_tem_29_colunas():
    assert len(MODEL) == 29
    assert MODEL[0] == "CH"
    assert MODEL[-1] == "Offset"


@pytest.mark.parametrize("entrada,esperado", [
    (145.6, "145.60000"),
    (439, "439.00000"),
    ("145.6", "0.00000"),
    (None, "0.00000"),
    (float("nan"), "0.00000"),
])
def test_format_frequency(entrada, esperado):
    assert format_frequency(entrada) == esperado


@pytest.mark.parametrize("entrada,esperado", [
    (145, "145"),
    ("145.5", "145.5"),
    ("", ""),
    ("Digital", '"Digital"'),
    ("D SP Campinas", '"D SP Campinas"'),
    ("1_000", '"1_000"'),
    (float("inf"), '"inf"'),
])
def test_quote_if_not_numeric(entrada, esperado):
    assert quote_if_not_numeric(entrada) == esperado


# ==========================================
# ALIAS
# ==========================================

def test_alias_padrao():
    assert build_channel_alias(["SP", "Campinas"], "D") == "D SP Campinas"


def test_alias_com_indice_de_duplicata():
    assert build_channel_alias(["SP", "Campinas", 2], "A") == "A SP Campinas 2"


def test_alias_template_customizado():
    template = "{{$UF}}-{{$CITY}}{{[ #{{$COUNT}}]}}"
    assert build_channel_alias(["RJ", "Niteroi"], "D", template) == "RJ-Niteroi"
    assert build_channel_alias(["RJ", "Niteroi", 1], "D", template) == "RJ-Niteroi #1"


def test_alias_location_invalida():
    assert build_channel_alias(["SP"], "D") == "Unknown"
    assert build_channel_alias(None, "D") == "Unknown"


def test_modo_do_canal():
    assert channel_mode_flag({"timeslot": [1], "color": 1}) == "D"
    assert channel_mode_flag({"timeslot": [], "color": 1}) == "A"
    assert channel_mode_flag({"timeslot": [1], "color": 0}) == "A"
    assert channel_mode_flag({}) == "A"


# ==========================================
# LINHA DO CANAL
# ==========================================

def test_convert_record(registro_sp):
    row = _as_columns(convert_record(registro_sp, 1))

    assert row["CH"] == 1
    assert row["RX Freq"] == "145.00000"
    assert row["TX Freq"] == "145.60000"
    assert row["CH Alias"] == "D SP Sao Paulo"
    assert row["CH ID"] == "724001"
    assert row["Dual Slot"] == "Off"
    assert row["Time Slot"] == 1
    assert row["Color Code"] == "1"
    assert row["Offset"] == "0.60000"
    assert row["CH Mode"] == "Digital"
    assert row["TOT"] == 60


def test_dual_slot(registro_sp):
    registro_sp["timeslot"] = [1, 2]
    row = _as_columns(convert_record(registro_sp, 3))
    assert row["Dual Slot"] == "On"
    assert row["CH"] == 3


def test_fallback_para_ts_linked():
    row = _as_columns(convert_record({"ts_linked": "TS1 TS2", "location": ["SP", "Santos"]}, 1))
    assert row["Dual Slot"] == "On"
    assert row["Time Slot"] == 1


def test_offset_calculado_quando_ausente(registro_sp):
    del registro_sp["offset"]
    row = _as_columns(convert_record(registro_sp, 1))
    assert row["Offset"] == "0.60000"


def test_registro_minimo():
    row = _as_columns(convert_record({}, 1))

    assert row["RX Freq"] == "0.00000"
    assert row["CH Alias"] == "A XX Unknown"
    assert row["CH ID"] == ""
    assert row["Color Code"] == "1"


# ==========================================
# CONVERSÃO COMPLETA
# ==========================================

def test_json_to_model_com_cabecalho(registro_sp):
    rows = json_to_model([registro_sp, registro_sp])

    assert rows[0] == MODEL
    assert [r[0] for r in rows[1:]] == [1, 2]


def test_aceita_registros_normalizados():
    record = NormalizedRecord(
        rx=439.0125, tx=434.0125, color=1, timeslot=[2],
        info=RecordInfo(dmr_id=724002), location=["SP", "Campinas", 1],
    )
    row = _as_columns(json_to_model([record])[1])

    assert row["CH Alias"] == "D SP Campinas 1"
    assert row["Time Slot"] == 2


def test_json_to_model_rejeita_objeto():
    with pytest.raises(ValueError):
        json_to_model({"rptrs": []})


def test_convert_to_model_string_json(registro_sp):
    rows = convert_to_model(json.dumps([registro_sp]))
    assert len(rows) == 2


@pytest.mark.parametrize("entrada", ["{nao e json", 123, None])
def test_convert_to_model_entrada_invalida(entrada):
    with pytest.raises(ValueError):
        convert_to_model(entrada)


def test_csv(registro_sp):
    csv = convert_to_model([registro_sp], to_csv=True)
    header, line = csv.split("\n")

    assert header.startswith('"CH","RX Freq","TX Freq"')
    assert line.startswith('1,145.00000,145.60000,"Digital"')
    assert '"D SP Sao Paulo"' in line


def test_csv_com_delimitador(registro_sp):
    csv = convert_to_model([registro_sp], to_csv=True, delimiter=";")
    assert csv.split("\n")[1].startswith("1;145.00000;145.60000")


def test_model_to_csv_vazio():
    with pytest.raises(ValueError):
        model_to_csv([])


def test_registro_de_modelos():
    assert get_model("RT4D")["columns"] == MODEL
    assert get_model("desconhecido") is None
