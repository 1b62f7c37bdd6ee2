import secrets
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from app.config import settings, validate_required_config
from app.errors import SiteBuilderError
from app.logging_config import logger
from app.models.schemas import (
    AutocompleteRequest,
    GenerateServicesRequest,
    JobHandle,
    Location,
    RadiusRequest,
    SiteAccepted,
    SiteCreate,
)
from app.services.jobs import submit_job
from app.services.lookup import autocomplete_search, fetch_cities_in_radius, require_user
from app.utils.categories import RADIUS_OPTIONS_KM


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting site builder location service", environment=settings.ENVIRONMENT)
    validate_required_config()
    yield
    logger.info("Shutting down site builder location service")


app = FastAPI(title="Site Builder Locations", version="1.0.0", lifespan=lifespan)

# Missing credentials are reported by the operations themselves as Unauthenticated
security = HTTPBasic(auto_error=False)


def get_current_user(credentials: Optional[HTTPBasicCredentials] = Depends(security)) -> Optional[str]:
    """Username for valid basic-auth credentials, else None"""
    if credentials is None:
        return None
    is_correct_username = secrets.compare_digest(credentials.username, settings.APP_USERNAME)
    is_correct_password = secrets.compare_digest(credentials.password, settings.APP_PASSWORD)
    if not (is_correct_username and is_correct_password):
        return None
    return credentials.username


app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SiteBuilderError)
async def site_builder_error_handler(request: Request, exc: SiteBuilderError) -> JSONResponse:
    logger.warning(
        "request failed",
        path=request.url.path,
        error=type(exc).__name__,
        detail=exc.message,
    )
    headers = {"WWW-Authenticate": "Basic"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


# Routes

@app.get("/health")
async def health_check():
    """Health check endpoint (unprotected)"""
    return {"status": "ok", "timestamp": datetime.now().isoformat()}


@app.get("/radius-options")
async def radius_options(user: Optional[str] = Depends(get_current_user)) -> List[int]:
    require_user(user)
    return list(RADIUS_OPTIONS_KM)


@app.post("/api/autocompleteSearch", response_model=List[Location])
async def autocomplete(request: AutocompleteRequest, user: Optional[str] = Depends(get_current_user)):
    """Address and place candidates for free text"""
    return await autocomplete_search(request.query, user)


@app.post("/api/fetchCitiesInRadius", response_model=List[Location])
async def cities_in_radius(request: RadiusRequest, user: Optional[str] = Depends(get_current_user)):
    """Cities, towns and villages around a point"""
    return await fetch_cities_in_radius(request.lat, request.lng, request.radius, user)


@app.post("/api/sites", response_model=SiteAccepted, status_code=status.HTTP_202_ACCEPTED)
async def create_site(site: SiteCreate, user: Optional[str] = Depends(get_current_user)) -> SiteAccepted:
    """Accept a submitted site form; storage happens downstream"""
    user_id = require_user(user)
    logger.info(
        "site submitted",
        name=site.name,
        subdomain=site.subdomain,
        user_id=user_id,
        secondary_cities=len(site.secondaryActivityCities),
    )
    return SiteAccepted(
        subdomain=site.subdomain,
        secondaryActivityCityCount=len(site.secondaryActivityCities),
        userId=user_id,
    )


@app.post("/api/generateServices", response_model=JobHandle, status_code=status.HTTP_202_ACCEPTED)
async def generate_services(request: GenerateServicesRequest, user: Optional[str] = Depends(get_current_user)):
    """Dispatch AI generation of related service names"""
    require_user(user)
    return await submit_job(request.services)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
