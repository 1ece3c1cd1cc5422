import hashlib
import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .core.city_matcher import DEFAULT_THRESHOLDS, MatchThresholds
from .core.record_normalizer import normalize_record
from .core.text_normalizer import normalize_name
from .schema.models import NormalizedRecord
from .schema.orchestrator_models import BatchSummary, PipelineEvent

logger = logging.getLogger(__name__)

DEFAULT_SOURCES = ["rptrs.json", "https://radioid.net/static/rptrs.json"]
DEFAULT_CACHE_KEY = "radioid.net"


class InvalidDatasetError(ValueError):
    """Dataset sem a estrutura esperada ({"rptrs": [...]})."""


@dataclass
class NormalizationContext:
    """
    Estado de um lote: base de cidades, limiares e contador de duplicatas.
    Deve ser criado a cada execução; reaproveitar vaza índices de duplicata.
    """
    city_index: Any
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS
    city_counts: Dict[str, int] = field(default_factory=dict)


def city_sort_key(record: NormalizedRecord):
    city = record.city
    return (normalize_name(city).casefold(), city)


def noop_saver(records, paths, state_code):
    return None


class Orchestrator:
    """
    Coordenador do lote de repetidoras.
    Responsável por unir Load -> Normalize -> Save com rastreabilidade.
    Loader, resolver de caminhos e saver são injetados.
    """

    def __init__(
            self,
            loader,
            city_index,
            resolver: Callable[[str], Any] = lambda state_code: None,
            saver: Callable[[List[NormalizedRecord], Any, str], Any] = noop_saver,
            thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
            sources: Sequence[str] = DEFAULT_SOURCES,
            cache_key: str = DEFAULT_CACHE_KEY
    ):
        self.loader = loader
        self.city_index = city_index
        self.resolver = resolver
        self.saver = saver
        self.thresholds = thresholds
        self.sources = list(sources)
        self.cache_key = cache_key

    def _calculate_hash(self, data: Any) -> str:
        """Gera SHA-256 determinístico do dataset."""
        content = json.dumps(data, sort_keys=True, ensure_ascii=False, default=str).encode('utf-8')
        return hashlib.sha256(content).hexdigest()

    def new_context(self) -> NormalizationContext:
        return NormalizationContext(city_index=self.city_index, thresholds=self.thresholds)

    def run(self) -> BatchSummary:
        """
        Carrega o dataset das fontes configuradas e processa o lote.

        Raises:
            SourceUnavailableError: nenhuma fonte pôde ser carregada
            InvalidDatasetError: dataset sem lista 'rptrs'
        """
        start_load = time.time()
        try:
            data = self.loader.load(self.sources, self.cache_key)
        except Exception:
            logger.exception("Erro ao carregar dataset de %s", self.sources)
            raise

        load_event = PipelineEvent(
            stage="LOAD",
            status="SUCCESS",
            details={
                "duration_sec": round(time.time() - start_load, 4),
                "sources": self.sources,
                "cache_key": self.cache_key,
            },
            error_policy="CONTINUE"
        )
        return self.process(data, self.new_context(), events=[load_event])

    def process(
            self,
            data: Any,
            context: Optional[NormalizationContext] = None,
            events: Optional[List[PipelineEvent]] = None
    ) -> BatchSummary:
        """
        Processa um dataset já carregado.

        Args:
            data: objeto com a lista 'rptrs'
            context: contexto do lote (um novo é criado se omitido)
            events: eventos anteriores (ex: LOAD) para o audit trail
        """
        if not isinstance(data, Mapping) or not isinstance(data.get("rptrs"), list):
            raise InvalidDatasetError("JSON inválido. Esperado objeto com '.rptrs'")

        context = context or self.new_context()
        raw_records = data["rptrs"]

        summary = BatchSummary(
            start_time=datetime.now(),
            records_in=len(raw_records),
            events=list(events or []),
            raw_metadata={"input_hash_sha256": self._calculate_hash(data)},
        )

        # ====================================================
        # NORMALIZE: sequencial, o índice de duplicata depende da ordem
        # ====================================================
        start_norm = time.time()
        states: Dict[str, List[NormalizedRecord]] = {}
        failed = 0
        for position, raw in enumerate(raw_records):
            if not isinstance(raw, Mapping):
                continue
            try:
                result = normalize_record(raw, context.city_counts, context.city_index, context.thresholds)
            except Exception as e:
                # Registro com erro é descartado; o lote segue
                failed += 1
                logger.warning("Registro %d descartado: %s", position, e)
                continue
            if result is None:
                continue
            states.setdefault(result["state_code"], []).append(result["record"])

        accepted = sum(len(records) for records in states.values())
        summary.events.append(PipelineEvent(
            stage="NORMALIZE",
            status="SUCCESS",
            details={
                "duration_sec": round(time.time() - start_norm, 4),
                "records_in": len(raw_records),
                "records_accepted": accepted,
                "records_failed": failed,
                "states_found": len(states),
            },
            error_policy="CONTINUE"
        ))

        # ====================================================
        # SAVE: por UF, na ordem em que a UF apareceu
        # ====================================================
        start_save = time.time()
        for state_code, records in states.items():
            records.sort(key=city_sort_key)

            try:
                saved = self.saver(records, self.resolver(state_code), state_code)
            except Exception as e:
                summary.events.append(PipelineEvent(
                    stage="SAVE",
                    status="FAILURE",
                    details={"state": state_code, "error": str(e)},
                    error_policy="ABORT"
                ))
                logger.exception("Erro ao salvar UF %s", state_code.upper())
                raise

            summary.contents[state_code] = records
            summary.total_states += 1
            summary.records_out += len(records)
            summary.processed_states.append(state_code)
            if saved is not None:
                summary.saved_files.append(saved)

            logger.info("Estado %s: %d registros", state_code.upper(), len(records))

        summary.events.append(PipelineEvent(
            stage="SAVE",
            status="SUCCESS",
            details={
                "duration_sec": round(time.time() - start_save, 4),
                "states_saved": summary.total_states,
            },
            error_policy="CONTINUE"
        ))
        summary.end_time = datetime.now()

        logger.info(
            "Processado: %d estados, %d registros (original: %d)",
            summary.total_states, summary.records_out, summary.records_in,
        )
        return summary
