from typing import List, Optional, Dict, Literal, Any
from datetime import datetime
from pydantic import BaseModel, Field
from .models import NormalizedRecord

class PipelineEvent(BaseModel):
    """
    Evento imutável ocorrido durante o lote.
    Usado para auditoria do processamento.
    """
    timestamp: datetime = Field(default_factory=datetime.now)
    stage: Literal["LOAD", "NORMALIZE", "SAVE"]
    status: Literal["SUCCESS", "FAILURE"]
    # Details deve ser flat e serializável
    details: Dict[str, Any] = Field(default_factory=dict)
    error_policy: Literal["ABORT", "CONTINUE"] = "ABORT"

class BatchSummary(BaseModel):
    """
    Resultado de um lote.
    Contadores de entrada/saída permitem detectar perdas silenciosas
    (registros descartados por UF/cidade não resolvidas).
    """
    start_time: datetime
    end_time: Optional[datetime] = None

    total_states: int = 0
    records_in: int = 0
    records_out: int = 0

    processed_states: List[str] = Field(default_factory=list)
    saved_files: List[Any] = Field(default_factory=list)

    # UF -> registros ordenados por cidade
    contents: Dict[str, List[NormalizedRecord]] = Field(default_factory=dict)

    # Audit Trail: Lista ordenada de eventos
    events: List[PipelineEvent] = Field(default_factory=list)

    # Metadados brutos (ex: hash do dataset)
    raw_metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def records_dropped(self) -> int:
        return self.records_in - self.records_out

    def contents_json(self) -> Dict[str, List[Dict[str, Any]]]:
        return {uf: [r.to_json() for r in records] for uf, records in self.contents.items()}
