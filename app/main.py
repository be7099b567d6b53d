"""Aplicación FastAPI: logging, manejadores de error, CORS y montaje del router v1."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router as api_router
from app.core.config import settings
from app.core.database import init_db
from app import models  # noqa: F401  registra las tablas en Base.metadata

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": nombre, "description": descripcion}
    for nombre, descripcion in (
        ("auth", "Registro público (instructor o aprendiz) y login; devuelve un JWT."),
        ("api", "Perfil del usuario autenticado."),
        ("usuarios", "Consulta y gestión de instructores, aprendices y administradores."),
        ("cursos", "Fichas: alta, edición, baja y lista de aprendices inscritos."),
        ("asistencias", "Un registro por aprendiz, curso y fecha: presente, ausente, excusa o retardo."),
        ("evaluaciones", "Evaluaciones por curso, calificación de aprendices y entrega de evidencias."),
        ("calificaciones", "Notas por aprendiz o curso, corrección y resumen académico."),
        ("salud", "Estado del servicio."),
    )
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("%s lista en %s", settings.app_name, settings.api_prefix)
    yield
    logger.info("%s detenida", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="""
API REST para el registro de **asistencia** y **evaluaciones** de cursos (fichas),
con roles instructor, aprendiz y admin.

## Token

POST `/api/v1/auth/login` devuelve `data.access_token`; péguelo en **Authorize** sin el prefijo Bearer.

## Formato de respuesta

Éxito: `{"success": true, "data": ...}` (los listados agregan `count`).
Error: `{"success": false, "error": "mensaje"}`.
""",
    version="0.1.0",
    openapi_tags=OPENAPI_TAGS,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    swagger_ui_parameters={"persistAuthorization": True, "tryItOutEnabled": True},
)


def esquema_openapi():
    """Esquema OpenAPI con instrucciones para el token en el botón Authorize."""
    if app.openapi_schema is not None:
        return app.openapi_schema
    esquema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=OPENAPI_TAGS,
    )
    esquemas = esquema.get("components", {}).get("securitySchemes", {})
    for nombre in [n for n, s in esquemas.items() if s.get("scheme") == "bearer"]:
        esquemas[nombre]["description"] = (
            f"access_token de POST {settings.api_prefix}/auth/login, sin el prefijo Bearer"
        )
    app.openapi_schema = esquema
    return esquema


app.openapi = esquema_openapi


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def mensajes_validacion(errores) -> list[str]:
    """Un texto "campo: motivo" por restricción incumplida, sin el prefijo body/query/path."""
    mensajes = []
    for error in errores:
        campo = ".".join(str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path"))
        mensajes.append(f"{campo}: {error['msg']}" if campo else error["msg"])
    return mensajes


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": mensajes_validacion(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Error no controlado en %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Error del servidor"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.api_prefix)


@app.get(
    "/health",
    tags=["salud"],
    summary="Estado del servicio",
    response_description="Indica que la API está en ejecución",
)
async def health_check():
    return {"status": "ok", "servicio": settings.app_name}
