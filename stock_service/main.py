from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

# Use relative imports
from . import schemas, logic, config

# Basic logging setup
logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Mock Stock Service running on http://{config.APP_HOST}:{config.APP_PORT}")
    yield
    logger.info("Mock Stock Service shutting down...")

app = FastAPI(
    title="Mock Stock Service",
    description="Answers stock availability queries from a fixed in-memory table.",
    version="0.1.0",
    lifespan=lifespan
)


@app.get("/health", tags=["Monitoring"], summary="Health Check")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy"}

@app.post(
    "/stock",
    response_model=schemas.StockResponse,
    tags=["Stock"],
    summary="Check Stock For SKU"
)
async def stock_endpoint(request_data: schemas.StockRequest):
    logger.info(f"Received stock request for SKU: {request_data.sku}")
    return logic.lookup_stock(request_data)
