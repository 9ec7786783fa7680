# app/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from shared.core.database import Base, catalog_engine
from shared.helpers.exception_handler import setup_exception_handlers

from .models.catalog import items, parameters, recipe_lines  # noqa: F401 (register tables)
from .router.catalog import items_router, pricing_router, recipes_router, tiendanube_router

app = FastAPI(title="Catalog Service API")

# Create all tables
Base.metadata.create_all(bind=catalog_engine)

# Allow requests from the React app
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:8003",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
setup_exception_handlers(app)

# Include routers
app.include_router(items_router.router)
app.include_router(recipes_router.router)
app.include_router(pricing_router.router)
app.include_router(tiendanube_router.router)


@app.get("/api/catalog/health")
def health():
    return {"status": "healthy"}
