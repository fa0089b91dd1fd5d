import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import LOG_LEVEL, MOCK_MODE
from database import init_db
from services.db_ops import seed_default_templates

from routers.compliance import router as compliance_router
from routers.templates import router as templates_router
from routers.entities import vendors_router, tenants_router
from routers.reference import router as reference_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if init_db():
        seed_default_templates()
    if MOCK_MODE:
        logger.info("MOCK_MODE enabled - certificates are extracted with regexes")
    yield


app = FastAPI(
    title="COI Tracker",
    description="Certificate of insurance compliance tracking for vendors and tenants",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(compliance_router)
app.include_router(templates_router)
app.include_router(vendors_router)
app.include_router(tenants_router)
app.include_router(reference_router)


@app.get("/")
def read_root():
    return {"status": "online", "message": "COI Tracker API - certificate compliance for vendors and tenants"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8081)
