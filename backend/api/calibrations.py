"""
Calibrations API
================

REST endpoints over the calibration search engine.

Endpoints:
- GET /api/calibrations/{id} - Single published calibration
- GET /api/calibrations - Search by clade / tipTaxa and minAge / maxAge / geologicalTime

Both accept ?format=csv; JSON otherwise.
"""
import csv
import io
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from pydantic import BaseModel

from models.domain.calibration import Calibration
from repositories import get_db_pool
from services.search_service import CalibrationSearchService


router = APIRouter(prefix="/api/calibrations", tags=["Calibrations"])

# Parameters that shape the response rather than the search
FORMAT_PARAMS = {'format'}

CSV_COLUMNS = [
    'id', 'nodeName', 'nodeMinAge', 'nodeMaxAge', 'calibrationReference',
    'fossils', 'publicationImages', 'treeImages',
]


class FossilResponse(BaseModel):
    """Fossil evidence for a calibration."""
    id: int
    collection: Optional[str] = None
    collectionNumber: Optional[str] = None
    shortReference: Optional[str] = None
    fullReference: Optional[str] = None
    stratUnit: Optional[str] = None
    maxAge: Optional[float] = None
    maxAgeType: Optional[str] = None
    maxAgeTypeDetails: Optional[str] = None
    minAge: Optional[float] = None
    minAgeType: Optional[str] = None
    minAgeTypeDetails: Optional[str] = None
    locationRelativeToNode: Optional[str] = None


class ImageResponse(BaseModel):
    """Publication or tree image."""
    id: int
    url: str
    caption: Optional[str] = None


class CalibrationResponse(BaseModel):
    """Fully populated calibration."""
    id: int
    nodeName: Optional[str] = None
    nodeMinAge: Optional[float] = None
    nodeMaxAge: Optional[float] = None
    calibrationReference: Optional[str] = None
    fossils: List[FossilResponse] = []
    publicationImages: List[ImageResponse] = []
    treeImages: List[ImageResponse] = []


class SearchResponse(BaseModel):
    """Search parameters echoed back with the matching calibrations."""
    query: dict
    calibrations: List[CalibrationResponse]


async def get_search_service() -> CalibrationSearchService:
    """Search service over the shared pool"""
    return CalibrationSearchService.from_pool(await get_db_pool())


def _csv_row(calibration: Calibration) -> dict:
    """Flatten one calibration; nested lists become ';'-joined IDs / URLs"""
    row = calibration.to_dict()
    row['fossils'] = ';'.join(str(f.id) for f in calibration.fossils)
    row['publicationImages'] = ';'.join(i.url for i in calibration.publication_images)
    row['treeImages'] = ';'.join(i.url for i in calibration.tree_images)
    return row


def csv_response(calibrations: List[Calibration]) -> Response:
    """Header row plus one row per calibration"""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS)
    writer.writeheader()
    for calibration in calibrations:
        writer.writerow(_csv_row(calibration))
    return Response(content=buffer.getvalue(), media_type="text/csv")


def _search_params(request: Request) -> dict:
    """Query string -> search parameter mapping (tipTaxa may repeat)"""
    params = {}
    for key in request.query_params.keys():
        if key in FORMAT_PARAMS:
            continue
        if key == 'tipTaxa':
            values = request.query_params.getlist(key)
            params[key] = values if len(values) > 1 else values[0]
        else:
            params[key] = request.query_params.get(key)
    return params


@router.get("", response_model=SearchResponse)
async def search_calibrations(
    request: Request,
    format: Optional[str] = Query(None, description="'csv' for CSV output"),
    service: CalibrationSearchService = Depends(get_search_service),
):
    """
    Search calibrations.

    Query params:
        clade: Clade name (wins over tipTaxa)
        tipTaxa: One or two taxa, repeated or comma-separated
        geologicalTime: Period[,Epoch[,Age]] prefix (wins over minAge/maxAge)
        minAge, maxAge: Age bounds in Ma
        format: 'csv' for CSV output

    Returns:
        {query, calibrations}
    """
    result = await service.search(_search_params(request))

    if format == 'csv':
        return csv_response(result.calibrations)
    return result.to_dict()


@router.get("/{calibration_id}", response_model=CalibrationResponse)
async def get_calibration(
    calibration_id: int,
    format: Optional[str] = Query(None, description="'csv' for CSV output"),
    service: CalibrationSearchService = Depends(get_search_service),
):
    """
    Get single published calibration by ID.

    Returns:
        Calibration with fossils and images
    """
    calibration = await service.find_by_id(calibration_id)

    if format == 'csv':
        return csv_response([calibration])
    return calibration.to_dict()
