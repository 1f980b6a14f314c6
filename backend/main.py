import logging
from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from core.config import settings
from db.database import create_db_and_tables
from routers.orders import router as orders_router
from routers.shortages import router as shortages_router
from routers.suppliers import router as suppliers_router
from contextlib import asynccontextmanager

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    yield


app = FastAPI(
    title="Pedidos API",
    description="Supplier orders and out-of-stock (faltantes) tracking",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"ok": True, "service": "pedidos"}


app.include_router(suppliers_router, prefix="/suppliers", tags=["suppliers"])
app.include_router(orders_router, prefix="/orders", tags=["orders"])
app.include_router(shortages_router, prefix="/shortages", tags=["shortages"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
