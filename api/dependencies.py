"""
FastAPI dependency injection utilities.
Provides the city index, output directory and matching thresholds.
"""
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from fastapi import HTTPException, status
from rptr_config import settings

from repetidoras.core.city_index import CityNameIndex
from repetidoras.core.city_matcher import MatchThresholds
from repetidoras.core.state_normalizer import normalize_state
from repetidoras.models.rt4d import get_model


@lru_cache(maxsize=1)
def get_city_index() -> CityNameIndex:
    """
    Shared city index for the process.
    Loaded lazily on the first normalization request.
    """
    return CityNameIndex.from_settings(settings)


def get_output_dir() -> Path:
    return settings.output_path


def get_thresholds() -> MatchThresholds:
    return MatchThresholds.from_settings(settings)


def resolve_state_code(state: str) -> str:
    """
    Accept any spelling the state normalizer understands ("SP", "São Paulo").
    
    Raises:
        HTTPException: 404 for unknown states
    """
    code = normalize_state(state)
    if not code:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown state: {state}"
        )
    return code


def resolve_model(model: str) -> Dict[str, Any]:
    found = get_model(model)
    if found is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown model: {model}"
        )
    return found
