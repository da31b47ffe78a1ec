from fastapi import FastAPI, HTTPException, Depends, Body, Query, Request, status
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, Dict, List
import logging

import httpx

from . import config, schemas
from .analytics import AnalyticsLog
from .database import create_engine_and_factory, create_tables
from .errors import NotFoundError, ServiceNotConfiguredError, ValidationError
from .events import EventPublisher
from .kafka_client import connect_external_sink
from .service import OrderService

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


# --- FastAPI Lifespan Events ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup...")
    service_config = config.ServiceConfig.from_env()

    engine, session_factory = create_engine_and_factory()
    # Development convenience only, schema migration is handled elsewhere
    await create_tables(engine)

    # Resolved once: None means local-only delivery for the life of the process
    external_sink = await connect_external_sink(
        service_config.kafka_bootstrap_servers, service_config.order_submitted_topic
    )
    if not service_config.stock_service_url:
        logger.warning("stockService is not configured, stock checks will be unavailable")

    http_client = httpx.AsyncClient(timeout=service_config.stock_timeout_seconds)
    app.state.order_service = OrderService(
        service_config,
        session_factory,
        EventPublisher(AnalyticsLog(session_factory), external_sink),
        http_client=http_client,
    )

    yield # Application runs here

    logger.info("Application shutdown...")
    await http_client.aclose()
    if external_sink is not None:
        await external_sink.stop()
    await engine.dispose()


# --- FastAPI App ---
app = FastAPI(
    title="Order Service",
    description="Validates orders, computes totals on submission, reports stock and publishes OrderSubmitted events.",
    version="0.1.0",
    lifespan=lifespan
)


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


@app.get("/health", summary="Health Check", tags=["Monitoring"])
async def health_check():
    return {"status": "ok"}


@app.post(
    "/orders",
    response_model=schemas.OrderRead,
    status_code=status.HTTP_201_CREATED,
    tags=["Orders"],
    summary="Create Order"
)
async def create_order_endpoint(
    order_data: Dict[str, Any] = Body(...),
    service: OrderService = Depends(get_order_service)
):
    """Validates and stores a new order. The total is only computed on submission."""
    try:
        return await service.create_order(order_data)
    except ValidationError as e:
        logger.warning(f"Rejected order: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.get("/orders", response_model=List[schemas.OrderRead], tags=["Orders"], summary="List Orders")
async def list_orders_endpoint(service: OrderService = Depends(get_order_service)):
    return await service.list_orders()


@app.get(
    "/orders/high-value",
    response_model=List[schemas.OrderRead],
    tags=["Orders"],
    summary="Orders With Total Above Threshold"
)
async def high_value_orders_endpoint(
    min_total: Decimal = Query(..., ge=0),
    service: OrderService = Depends(get_order_service)
):
    return await service.get_high_value_orders(min_total)


@app.get("/orders/{order_id}", response_model=schemas.OrderRead, tags=["Orders"], summary="Get Order")
async def get_order_endpoint(order_id: str, service: OrderService = Depends(get_order_service)):
    try:
        return await service.get_order(order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@app.post(
    "/orders/{order_id}/submit",
    response_model=schemas.SubmissionResult,
    tags=["Orders"],
    summary="Submit Order"
)
async def submit_order_endpoint(order_id: str, service: OrderService = Depends(get_order_service)):
    """
    Computes and stores the order total, then publishes OrderSubmitted.
    Missing or empty orders come back as success=false with a message.
    """
    return await service.submit_order(order_id)


@app.get(
    "/orders/{order_id}/stock",
    response_model=schemas.OrderWithStock,
    tags=["Stock"],
    summary="Get Order With Stock Report"
)
async def order_with_stock_endpoint(order_id: str, service: OrderService = Depends(get_order_service)):
    try:
        return await service.get_order_with_stock(order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@app.post("/stock/check", response_model=schemas.StockResult, tags=["Stock"], summary="Check Stock For SKU")
async def check_stock_endpoint(query: schemas.StockQuery, service: OrderService = Depends(get_order_service)):
    try:
        return await service.check_stock(query.sku)
    except ServiceNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
