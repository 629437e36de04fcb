import logging

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from typing import Optional

from address_search.core.config import settings
from address_search.core.logging_config import setup_logging, truncate_query
from address_search.models import ReverseGeocodeResponse, SearchResponse
from address_search.recall.orchestrator import AddressSearchService, parse_city_param

logger = logging.getLogger(__name__)

app = FastAPI(title="Address Search Service", version="1.0")


@app.on_event("startup")
async def startup_event():
    setup_logging()
    app.state.search_service = AddressSearchService()
    logger.info(f"Address search ready, upstream {settings.NOMINATIM_BASE_URL}")


def get_search_service(request: Request) -> AddressSearchService:
    service = getattr(request.app.state, "search_service", None)
    if service is None:
        service = AddressSearchService()
        request.app.state.search_service = service
    return service


@app.get("/search-address", response_model=SearchResponse)
async def search_address(
    q: str = "",
    limit: int = Query(default=settings.DEFAULT_LIMIT, ge=1),
    city: Optional[str] = None,
    service: AddressSearchService = Depends(get_search_service),
):
    # Explicit cities win; otherwise the store-wide defaults, if any
    cities = parse_city_param(city) or (settings.DEFAULT_CITIES or None)

    if not q or len(q.strip()) < settings.MIN_QUERY_LENGTH:
        return {"success": True, "data": {"addresses": []}}

    addresses = await service.search(
        q, city=cities, limit=min(limit, settings.MAX_LIMIT)
    )
    logger.info(
        f"search-address q='{truncate_query(q)}' cities={cities} found={len(addresses)}"
    )
    return {"success": True, "data": {"addresses": addresses}}


@app.get(
    "/reverse-geocode",
    response_model=ReverseGeocodeResponse,
    response_model_exclude_none=True,
)
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    service: AddressSearchService = Depends(get_search_service),
):
    address = await service.reverse_geocode(lat, lon)
    if address is None:
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": "Address not found"},
        )
    return {"success": True, "data": {"address": address}}


@app.get("/health")
async def health():
    return {"status": "ok", "nominatim": settings.NOMINATIM_BASE_URL}


if __name__ == "__main__":
    uvicorn.run(app, host=settings.SERVICE_HOST, port=settings.APP_PORT)
