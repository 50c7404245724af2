import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI, File, HTTPException, Query, Request, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from errors import NotFoundError
from media_tracker import MediaTracker
from models import Event, EventIn, EventPatch, EventsQuery, SortField, SortOrder, UploadedFile
from repo_events import EventRepo
from service_events import EventService
from settings import Settings, settings
from uploads import UploadHandler

logger = logging.getLogger(__name__)

router = APIRouter()


def get_service(request: Request) -> EventService:
    return request.app.state.svc


def get_uploads(request: Request) -> UploadHandler:
    return request.app.state.uploads


@router.get("/")
def root():
    return {
        "name": "Calendrix API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


@router.get("/health")
def health(svc: EventService = Depends(get_service)):
    return {
        "ok": True,
        "events": svc.count(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/events", response_model=Event, status_code=201)
def create_event(data: EventIn, svc: EventService = Depends(get_service)):
    try:
        return svc.create(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/events", response_model=List[Event])
def list_events(
    search: Optional[str] = None,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    sort_by: Optional[SortField] = Query(None, alias="sortBy"),
    sort_order: SortOrder = Query("asc", alias="sortOrder"),
    svc: EventService = Depends(get_service),
):
    params = EventsQuery(
        search=search,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return svc.list(params)


@router.get("/events/{event_id}", response_model=Event)
def get_event(event_id: UUID, svc: EventService = Depends(get_service)):
    try:
        return svc.get(event_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/events/{event_id}", response_model=Event)
def update_event(event_id: UUID, patch: EventPatch, svc: EventService = Depends(get_service)):
    try:
        return svc.update(event_id, patch)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/events/{event_id}", status_code=204)
def delete_event(event_id: UUID, svc: EventService = Depends(get_service)):
    try:
        svc.delete(event_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)


def _store_upload(kind: str, file: Optional[UploadFile], uploads: UploadHandler) -> UploadedFile:
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    try:
        return uploads.save(
            kind,
            file.file,
            file.content_type,
            file.filename,
            declared_size=getattr(file, "size", None),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/uploads/image", response_model=UploadedFile, status_code=201)
def upload_image(file: Optional[UploadFile] = File(None), uploads: UploadHandler = Depends(get_uploads)):
    return _store_upload("image", file, uploads)


@router.post("/uploads/video", response_model=UploadedFile, status_code=201)
def upload_video(file: Optional[UploadFile] = File(None), uploads: UploadHandler = Depends(get_uploads)):
    return _store_upload("video", file, uploads)


@router.get("/uploads/{filename}")
def get_upload(filename: str, uploads: UploadHandler = Depends(get_uploads)):
    path = uploads.path_for(filename)
    if path is None:
        raise HTTPException(status_code=400, detail="File not found")
    return FileResponse(path)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Bad ids, malformed bodies and query params are all plain 400s here.
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(status_code=400, content={"detail": "; ".join(parts)})


def create_app(cfg: Settings = settings) -> FastAPI:
    """Build the API with its own store and upload directory.

    The store and upload handler live on `app.state` so the routes stay thin
    and tests can build isolated apps from their own `Settings`.
    """

    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uploads = UploadHandler(cfg)
    repo = EventRepo()
    svc = EventService(repo, MediaTracker(uploads))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Fresh start: nothing persists across restarts.
        uploads.reset()
        logger.info("Calendrix API ready, uploads in %s", uploads.root)
        yield

    app = FastAPI(title="Calendrix API", version="1.0.0", lifespan=lifespan)
    app.state.svc = svc
    app.state.uploads = uploads
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[cfg.cors_origin],
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
        allow_credentials=True,
    )
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
