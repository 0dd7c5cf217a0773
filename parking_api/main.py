import logging
import os
from contextlib import asynccontextmanager
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .billing import RATE_PER_HOUR
from .errors import ParkingError
from .models import LogEntry, Slot, make_engine
from .schemas import EntryResult, ErrorResponse, ExitResult, Summary, VehicleRequest
from .service import TOTAL_SLOTS_DEFAULT, ParkingLot, now_ms

logger = logging.getLogger("ParkingAPI")

# --- CONFIGURATION ---
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", 3000))
RATE = int(os.environ.get("PARKING_RATE_PER_HOUR", RATE_PER_HOUR))
TOTAL_SLOTS = int(os.environ.get("PARKING_TOTAL_SLOTS", TOTAL_SLOTS_DEFAULT))
DB_FILE = os.environ.get("PARKING_DB", "parking.db")
STATIC_DIR = os.environ.get(
    "PARKING_STATIC_DIR", os.path.join(os.path.dirname(__file__), "public")
)


class SPAStaticFiles(StaticFiles):
    """Static files, falling back to index.html for unknown paths."""

    async def get_response(self, path: str, scope):
        try:
            response = await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404:
                raise
            return await super().get_response("index.html", scope)
        if response.status_code == 404:
            return await super().get_response("index.html", scope)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The server must not come up without its store
    try:
        app.state.lot.init_storage()
    except Exception:
        logger.exception("Cannot open parking store, shutting down")
        raise
    yield


def get_lot(request: Request) -> ParkingLot:
    return request.app.state.lot


# --- API ---
router = APIRouter(prefix="/api", responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})


@router.get("/slots", response_model=List[Slot])
def get_slots(lot: ParkingLot = Depends(get_lot)):
    return lot.list_slots()


@router.post("/entry", response_model=EntryResult)
def record_entry(req: Optional[VehicleRequest] = None, lot: ParkingLot = Depends(get_lot)):
    return lot.record_entry(req.vehicle_number if req else None)


@router.post("/exit", response_model=ExitResult)
def record_exit(req: Optional[VehicleRequest] = None, lot: ParkingLot = Depends(get_lot)):
    return lot.record_exit(req.vehicle_number if req else None)


@router.get("/logs", response_model=List[LogEntry])
def get_logs(lot: ParkingLot = Depends(get_lot)):
    return lot.list_logs()


@router.get("/summary", response_model=Summary)
def get_summary(lot: ParkingLot = Depends(get_lot)):
    return lot.summary()


@router.get("/health")
def health():
    return {"status": "ok"}


# --- ERRORS ---
async def parking_error_handler(request: Request, exc: ParkingError):
    return JSONResponse({"error": str(exc)}, status_code=exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": "Invalid request body"}, status_code=400)


async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse({"error": str(exc)}, status_code=500)


def create_app(
    engine=None,
    rate_per_hour: int = RATE,
    total_slots: int = TOTAL_SLOTS,
    clock: Callable[[], int] = now_ms,
    static_dir: str = STATIC_DIR,
) -> FastAPI:
    if engine is None:
        engine = make_engine(f"sqlite:///{DB_FILE}")

    app = FastAPI(title="Parking slot tracker", lifespan=lifespan)
    app.state.lot = ParkingLot(engine, rate_per_hour=rate_per_hour, total_slots=total_slots, clock=clock)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ParkingError, parking_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

    app.include_router(router)

    # --- STATIC MOUNTS ---
    # Mounted last so the API routes match first
    app.mount("/", SPAStaticFiles(directory=static_dir, html=True), name="dashboard")
    return app
