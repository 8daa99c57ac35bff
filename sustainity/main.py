"""
FastAPI application for the Sustainity CSV explorer.

Endpoints:
- Source selection (upload or static path/URL)
- Filtered, sorted table view and sort toggling
- Numeric column chart summary
- CSV export download
- Status and error banners
"""
from typing import Optional

from fastapi import FastAPI, UploadFile, File, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from sustainity.models import (
    SourceRequest,
    SortRequest,
    SortState,
    UploadResponse,
    TableResponse,
    ChartResponse,
    StatusResponse,
)
from sustainity.config import DEFAULT_CSV_SOURCE, EXPORT_FILENAME, EXPORT_MEDIA_TYPE
from sustainity.errors import FetchError, SustainityError
from sustainity.services.workspace import Workspace

# ============================================================================
# App init
# ============================================================================
app = FastAPI(title="Sustainity CSV Explorer", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    print(f"[VALIDATION ERROR] URL: {request.url}")
    print(f"[VALIDATION ERROR] Errors: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "body": str(exc.body) if hasattr(exc, 'body') else None},
    )


@app.exception_handler(SustainityError)
async def sustainity_exception_handler(request: Request, exc: SustainityError):
    print(f"[{exc.category.upper()} ERROR] URL: {request.url} - {exc.message}")
    status_code = exc.status_code
    if isinstance(exc, FetchError) and exc.status in (400, 403, 404):
        status_code = exc.status
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# Global workspace (one session per process)
WORKSPACE = Workspace()


# ============================================================================
# Startup / shutdown
# ============================================================================

@app.on_event("startup")
async def startup_event():
    global WORKSPACE

    print("=" * 60)
    print("Initializing Sustainity CSV Explorer")
    print("=" * 60)

    WORKSPACE = Workspace()
    print(f"\nLoading default dataset: {DEFAULT_CSV_SOURCE}")
    status = await WORKSPACE.select_source(DEFAULT_CSV_SOURCE)
    print(f"  Table: {status['table']['state']} ({status['table']['rows']} rows)")
    print(f"  Chart: {status['chart']['state']}")
    print("=" * 60)


@app.on_event("shutdown")
async def shutdown_event():
    WORKSPACE.close()


# ============================================================================
# Source selection
# ============================================================================

@app.post("/upload/", response_model=UploadResponse)
async def upload_csv(file: UploadFile = File(...)):
    source = await WORKSPACE.select_upload(file)
    return UploadResponse(source=source, filename=file.filename)


@app.post("/source/", response_model=StatusResponse)
async def select_source(request: SourceRequest):
    status = await WORKSPACE.select_source(request.source)
    return StatusResponse(**status)


# ============================================================================
# Table
# ============================================================================

@app.get("/table/", response_model=TableResponse)
async def get_table(
    filter: Optional[str] = None,
    sort: Optional[str] = None,
    ascending: Optional[bool] = None,
):
    """
    Filtered/sorted rows of the current dataset.

    `filter`, `sort` and `ascending` update the table state when given;
    omitted parameters keep the current state.
    """
    if filter is not None:
        WORKSPACE.set_filter(filter)
    if sort is not None:
        WORKSPACE.set_sort(sort, True if ascending is None else ascending)
    elif ascending is not None and WORKSPACE.sort.column:
        WORKSPACE.set_sort(WORKSPACE.sort.column, ascending)

    rows = WORKSPACE.rows()
    return TableResponse(
        state=WORKSPACE.table.state.value,
        columns=WORKSPACE.columns(),
        rows=rows,
        total_rows=len(WORKSPACE.table.dataset),
        filter=WORKSPACE.filter,
        sort=WORKSPACE.sort,
    )


@app.post("/table/sort/", response_model=SortState)
async def toggle_sort(request: SortRequest):
    return WORKSPACE.toggle_sort(request.column)


# ============================================================================
# Chart
# ============================================================================

@app.get("/chart/", response_model=ChartResponse)
async def get_chart():
    state = WORKSPACE.chart.state.value
    if not WORKSPACE.chart.ready:
        message = WORKSPACE.chart.error_message() or "Loading..."
        return ChartResponse(state=state, message=message)
    if len(WORKSPACE.chart.dataset) == 0:
        return ChartResponse(state=state, message="No data to display.")

    chart = WORKSPACE.chart_data()
    if chart is None:
        return ChartResponse(state=state, message="No numeric data available for chart.")
    return ChartResponse(state=state, chart=chart)


# ============================================================================
# Export
# ============================================================================

@app.get("/export/")
async def export_csv(filtered: bool = False):
    csv_text = await WORKSPACE.export(filtered=filtered)
    return Response(
        content=csv_text,
        media_type=EXPORT_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


# ============================================================================
# Status
# ============================================================================

@app.get("/status/", response_model=StatusResponse)
async def get_status():
    return StatusResponse(**WORKSPACE.status())


@app.get("/")
async def root():
    return {"status": "ok", "message": "Sustainity CSV Explorer API"}
