from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docflow import __version__
from docflow.api.errors import register_exception_handlers
from docflow.api.routers import documents, favorites, health, templates
from docflow.common.logger import configure_logging
from docflow.core.config import get_settings

settings = get_settings()

configure_logging(settings)

app = FastAPI(
    title=settings.app_name,
    description="Document approval workflow engine",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(templates.router, prefix="/api")
app.include_router(documents.router, prefix="/api")
app.include_router(favorites.router, prefix="/api")
app.include_router(health.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else None,
    }
