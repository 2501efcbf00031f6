import logging
import os

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import EntryNotFoundError, StorageIOError
from .schemas import (
    CreatedResponse,
    JournalCategories,
    JournalEntry,
    JournalEntryCreate,
    JournalEntryList,
    JournalEntryRef,
    JournalEntryUpdate,
    ListOrder,
    SuccessResponse,
)
from .services.journal import JournalService
from .store import EntryStore

_logger = logging.getLogger(__name__)


def _add_cors(app: FastAPI) -> None:
    cors_origins = [origin.strip() for origin in os.getenv("CORS_ALLOW_ORIGINS", "").split(",") if origin.strip()]
    if cors_origins:
        allow_all = "*" in cors_origins
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if allow_all else cors_origins,
            allow_credentials=not allow_all,
            allow_methods=["*"],
            allow_headers=["*"],
        )


def get_journal_service(request: Request) -> JournalService:
    service = getattr(request.app.state, "journal_service", None)
    if service is None:
        raise RuntimeError("Journal service is not initialized")
    return service


async def storage_error_handler(request: Request, exc: StorageIOError) -> JSONResponse:
    _logger.error("Journal storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Journal storage unavailable"})


def create_app(store: EntryStore | None = None) -> FastAPI:
    app = FastAPI(title="Journal API")
    _add_cors(app)

    entry_store = store or EntryStore()
    app.state.store = entry_store
    app.state.journal_service = JournalService(entry_store)
    app.add_exception_handler(StorageIOError, storage_error_handler)

    @app.on_event("startup")
    async def startup() -> None:
        await entry_store.startup()

    @app.on_event("shutdown")
    async def shutdown() -> None:
        await entry_store.shutdown()

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/journals", response_model=JournalEntryList)
    async def list_entries(
        order: ListOrder = Query("created"),
        service: JournalService = Depends(get_journal_service),
    ):
        entries = await service.list_entries(display_order=order == "display")
        return {"entries": entries}

    @app.get("/api/journals/categories", response_model=JournalCategories)
    async def list_categories(service: JournalService = Depends(get_journal_service)):
        return {"categories": await service.list_categories()}

    @app.get("/api/journals/{entry_id}", response_model=JournalEntry)
    async def get_entry(entry_id: str, service: JournalService = Depends(get_journal_service)):
        try:
            return await service.get_entry(entry_id)
        except EntryNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Journal entry not found") from exc

    @app.post("/api/journals", response_model=CreatedResponse)
    async def create_entry(
        request: JournalEntryCreate,
        service: JournalService = Depends(get_journal_service),
    ):
        entry_id = await service.create_entry(
            date=request.date,
            title=request.title,
            text=request.text,
            categories=request.categories,
        )
        return {"success": True, "id": entry_id}

    @app.put("/api/journals", response_model=SuccessResponse)
    async def update_entry(
        request: JournalEntryUpdate,
        service: JournalService = Depends(get_journal_service),
    ):
        try:
            await service.update_entry(
                request.id,
                date=request.date,
                title=request.title,
                text=request.text,
                categories=request.categories,
                pinned=request.pinned,
            )
        except EntryNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Journal entry not found") from exc
        return {"success": True}

    @app.patch("/api/journals", response_model=SuccessResponse)
    async def toggle_pin(
        request: JournalEntryRef,
        service: JournalService = Depends(get_journal_service),
    ):
        await service.toggle_pin(request.id)
        return {"success": True}

    @app.delete("/api/journals", response_model=SuccessResponse)
    async def delete_entry(
        request: JournalEntryRef,
        service: JournalService = Depends(get_journal_service),
    ):
        await service.delete_entry(request.id)
        return {"success": True}

    return app


app = create_app()
