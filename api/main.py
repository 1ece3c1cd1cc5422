"""
FastAPI application entry point.
Read/convert surface over the repeater pipeline:
- API validates input and dispatches
- Orchestrator makes all normalization decisions
- Generated files are only read here, never written
"""
import json
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal

from fastapi import Body, Depends, FastAPI, HTTPException, Query, status
from fastapi.responses import JSONResponse, PlainTextResponse

from rptr_config import settings
from api.schemas import HealthResponse, ModelRowsResponse, NormalizeRequest, NormalizeResponse
from api.dependencies import (
    get_city_index,
    get_output_dir,
    get_thresholds,
    resolve_model,
    resolve_state_code,
)
from repetidoras.core.city_matcher import MatchThresholds
from repetidoras.core.output_writer import resolve_paths
from repetidoras.orchestrator import InvalidDatasetError, Orchestrator

# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Brazilian repeater normalization and radio channel export API",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(output_dir: Annotated[Path, Depends(get_output_dir)]):
    """
    Health check endpoint.
    Reports whether generated state files are available.
    """
    return HealthResponse(
        status="healthy",
        version=settings.APP_VERSION,
        checks={
            "api": True,
            "output_dir": output_dir.is_dir(),
        }
    )


@app.get("/v1/states/{state}", tags=["States"])
def get_state(
    state_code: Annotated[str, Depends(resolve_state_code)],
    output_dir: Annotated[Path, Depends(get_output_dir)],
) -> Dict[str, Any]:
    """
    Return the generated JSON for one state: `{ "<uf>": [records...] }`.
    """
    json_path = resolve_paths(output_dir, state_code)["json"]
    if not json_path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No data generated for state: {state_code.upper()}"
        )
    with open(json_path, "r", encoding="utf-8") as f:
        return json.load(f)


@app.post("/v1/models/{model}", tags=["Models"])
def convert_records(
    model: Annotated[Dict[str, Any], Depends(resolve_model)],
    records: Annotated[List[Dict[str, Any]], Body()],
    format: Annotated[Literal["rows", "csv"], Query()] = "rows",
):
    """
    Convert normalized records to a channel-programming model.

    **Example:**
    ```bash
    curl -X POST "http://localhost:8000/v1/models/rt4d?format=csv" \\
      -H "Content-Type: application/json" \\
      -d '[{"rx":145.0,"tx":145.6,"location":["SP","Campinas"]}]'
    ```
    """
    try:
        if format == "csv":
            content = model["convert"](
                records,
                to_csv=True,
                template=settings.CHANNEL_ALIAS_TEMPLATE,
                delimiter=settings.CSV_DELIMITER,
            )
            return PlainTextResponse(content, media_type="text/csv")

        rows = model["convert"](records, template=settings.CHANNEL_ALIAS_TEMPLATE)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )

    return ModelRowsResponse(model=model["name"], columns=rows[0], rows=rows[1:])


@app.post("/v1/normalize", response_model=NormalizeResponse, tags=["Processing"])
def normalize_dataset(
    dataset: NormalizeRequest,
    city_index: Annotated[Any, Depends(get_city_index)],
    thresholds: Annotated[MatchThresholds, Depends(get_thresholds)],
):
    """
    Run the normalization batch in memory over a posted dataset.

    **Flow:**
    1. Validate `{ "rptrs": [...] }` shape
    2. Normalize records in input order (duplicate indices depend on it)
    3. Group by state and sort by city
    4. Return the summary; nothing is written to disk
    """
    orchestrator = Orchestrator(loader=None, city_index=city_index, thresholds=thresholds)
    try:
        summary = orchestrator.process(dataset.model_dump())
    except InvalidDatasetError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )
    return NormalizeResponse.from_summary(summary)


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Global exception handler for unexpected errors.
    """
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc) if settings.DEBUG else "An unexpected error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG
    )
