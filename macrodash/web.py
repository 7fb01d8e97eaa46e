"""
FastAPI web interface for the dashboard analytics.

This module serves indicator data and analysis results as JSON for the
chart front end, plus a small HTML summary page. Undefined numbers (NaN,
infinity) are returned as null.
"""

import math
from datetime import datetime
from pathlib import Path
from typing import Dict, List
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel, field_validator, model_validator
from macrodash.cache import DataCache
from macrodash.config import DashboardConfig, load_config
from macrodash.entities import DataPoint
from macrodash.errors import DashboardError, DataError
from macrodash.analytics.merge import merge_series, filter_by_date_range
from macrodash.analytics.matrix import compute_correlation_matrix, build_matrix
from macrodash.analytics.histogram import histogram, split_by_regime
from macrodash.analytics.insights import generate_insights
from macrodash.analytics.summary import build_summary, compare_periods
from macrodash.analytics.transforms import moving_average, change_heatmap
from macrodash.data_sources.market import fetch_all
from macrodash.reporting.report import fmt


app = FastAPI(title="Market Dynamics Dashboard")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:8000"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

template_env = Environment(
    loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
    autoescape=select_autoescape(["html"]),
)


def clean(obj):
    """Recursively replace non-finite floats with None so the payload is valid JSON."""
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, dict):
        return {k: clean(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [clean(v) for v in obj]
    return obj


class Period(BaseModel):
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_date(cls, v):
        datetime.strptime(v, "%Y-%m-%d")
        return v

    @model_validator(mode="after")
    def validate_order(self):
        if self.start > self.end:
            raise ValueError("start must not be after end")
        return self


def get_config() -> DashboardConfig:
    return load_config()


def get_raw_data(config: DashboardConfig = Depends(get_config)) -> Dict[str, List[DataPoint]]:
    """Fetch all indicators (cached, with CSV fallback)."""
    cache = DataCache(config.cache_dir, ttl=config.cache_ttl)
    return fetch_all(config, cache=cache)


@app.exception_handler(DataError)
async def data_error_handler(request: Request, exc: DataError):
    return JSONResponse(status_code=503, content={"error": "Data unavailable", "message": str(exc)})


@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError):
    return JSONResponse(status_code=400, content={"error": "Bad Request", "message": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"error": "Bad Request", "message": str(exc)})


@app.get("/", response_class=HTMLResponse)
async def home(
    config: DashboardConfig = Depends(get_config),
    raw: Dict[str, List[DataPoint]] = Depends(get_raw_data)
):
    """HTML summary page."""
    summary = build_summary(raw, window=config.analysis.rolling_window, variables=config.variables)
    labels = [config.indicators[name].label for name in config.variables]
    matrix = [[fmt(v, 3) for v in row] for row in build_matrix(summary.correlations)]
    template = template_env.get_template("index.html")
    return HTMLResponse(template.render(
        labels=labels,
        statistics=[
            (config.indicators[name].label, {k: fmt(v) for k, v in stats.as_dict().items()},
             fmt(stats.coefficient_of_variation))
            for name, stats in summary.statistics.items()
        ],
        matrix=zip(labels, matrix),
        insights=summary.insights,
        today=datetime.now().strftime("%Y-%m-%d"),
    ))


@app.get("/api/data/all")
async def get_all_data(raw: Dict[str, List[DataPoint]] = Depends(get_raw_data)):
    return clean({name: [p.as_dict() for p in points] for name, points in raw.items()})


@app.get("/api/data/range")
async def get_data_by_range(
    start: str = Query(..., description="Start date (YYYY-MM-DD)"),
    end: str = Query(..., description="End date (YYYY-MM-DD)"),
    raw: Dict[str, List[DataPoint]] = Depends(get_raw_data)
):
    period = Period(start=start, end=end)
    return clean({
        name: [p.as_dict() for p in filter_by_date_range(points, period.start, period.end)]
        for name, points in raw.items()
    })


@app.get("/api/data/{indicator}")
async def get_indicator_data(indicator: str, raw: Dict[str, List[DataPoint]] = Depends(get_raw_data)):
    if indicator not in raw:
        raise HTTPException(status_code=404, detail=f"Unknown indicator: {indicator}")
    return clean([p.as_dict() for p in raw[indicator]])


@app.get("/api/data/{indicator}/changes")
async def get_monthly_changes(indicator: str, raw: Dict[str, List[DataPoint]] = Depends(get_raw_data)):
    """Year x month percentage change grid for the heatmap view."""
    if indicator not in raw:
        raise HTTPException(status_code=404, detail=f"Unknown indicator: {indicator}")
    return clean(change_heatmap(raw[indicator]))


@app.get("/api/analysis/correlations")
async def get_correlations(
    config: DashboardConfig = Depends(get_config),
    raw: Dict[str, List[DataPoint]] = Depends(get_raw_data)
):
    correlations = compute_correlation_matrix(merge_series(raw), config.variables)
    return clean({**correlations.as_dict(), "matrix": build_matrix(correlations)})


@app.get("/api/analysis/insights")
async def get_insights(
    config: DashboardConfig = Depends(get_config),
    raw: Dict[str, List[DataPoint]] = Depends(get_raw_data)
):
    insights = generate_insights(merge_series(raw), *config.variables)
    return clean([i.as_dict() for i in insights])


@app.get("/api/analysis/full")
async def get_full_analysis(
    window: int = Query(None, ge=2, le=120, description="Rolling correlation window"),
    config: DashboardConfig = Depends(get_config),
    raw: Dict[str, List[DataPoint]] = Depends(get_raw_data)
):
    summary = build_summary(
        raw, window=window or config.analysis.rolling_window, variables=config.variables
    )
    return clean(summary.as_dict())


@app.get("/api/analysis/moving-average/{indicator}")
async def get_moving_average(
    indicator: str,
    windows: List[int] = Query(None, description="Moving average windows"),
    config: DashboardConfig = Depends(get_config),
    raw: Dict[str, List[DataPoint]] = Depends(get_raw_data)
):
    if indicator not in raw:
        raise HTTPException(status_code=404, detail=f"Unknown indicator: {indicator}")
    series = merge_series({indicator: raw[indicator]})
    for window in windows or config.analysis.moving_average_windows:
        series = moving_average(series, indicator, window)
    return clean(series.to_records())


@app.get("/api/analysis/histogram")
async def get_regime_histogram(
    bins: int = Query(None, ge=1, le=50, description="Number of bins"),
    config: DashboardConfig = Depends(get_config),
    raw: Dict[str, List[DataPoint]] = Depends(get_raw_data)
):
    """NIFTY 50 returns under high vs low inflation, on shared bins."""
    cpi, _, nifty = config.variables
    high, low = split_by_regime(merge_series(raw), cpi, nifty, config.analysis.regime_threshold)
    result = histogram(high, low, bins or config.analysis.bin_count)
    return clean([b.as_dict() for b in result])


@app.get("/api/analysis/compare")
async def get_period_comparison(
    period1_start: str = Query(...),
    period1_end: str = Query(...),
    period2_start: str = Query(...),
    period2_end: str = Query(...),
    config: DashboardConfig = Depends(get_config),
    raw: Dict[str, List[DataPoint]] = Depends(get_raw_data)
):
    p1 = Period(start=period1_start, end=period1_end)
    p2 = Period(start=period2_start, end=period2_end)
    comparison = compare_periods(raw, (p1.start, p1.end), (p2.start, p2.end), config.variables)
    return clean(comparison.as_dict())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
