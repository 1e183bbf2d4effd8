import os
import shutil
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from rich.console import Console
from starlette.exceptions import HTTPException as StarletteHTTPException
from tubefetch.api import health, info, download
from tubefetch.config.settings import config
from tubefetch.core.errors import SpawnError, ToolTimeoutError
from tubefetch.core.logging import request_id_middleware, setup_logging
from tubefetch.core.state import state
from tubefetch.i18n import i18n
from tubefetch.models.internal import AuthConfig
from tubefetch.services.ytdlp import SubprocessExecutor, YTDLPCommandBuilder

console = Console()

setup_logging(config.logging)

app = FastAPI(
    title=config.api.title,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(request_id_middleware)

# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(info.router, tags=["Info"])
app.include_router(download.router, tags=["Download"])

# Direct access to finished files
app.mount(
    "/files",
    StaticFiles(directory=config.paths.downloads_dir, check_dir=False),
    name="files"
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Invalid body: 400 with one entry per violated field"""
    _ = i18n.translator(request.headers.get("accept-language"))
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": _("error.invalid_request"),
            "errors": errors,
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def detect_ytdlp_version() -> str:
    cmd = YTDLPCommandBuilder(binary=config.ytdlp.binary).build_version_command()
    try:
        result = await SubprocessExecutor.run(cmd, timeout=15.0)
    except (SpawnError, ToolTimeoutError) as e:
        console.print(f"[yellow]⚠ {e.message}[/yellow]")
        return "unknown"
    if result.returncode != 0:
        return "unknown"
    return result.stdout.strip() or "unknown"


@app.on_event("startup")
async def startup_event():
    os.makedirs(config.paths.downloads_dir, exist_ok=True)
    os.makedirs(config.paths.scratch_dir, exist_ok=True)

    state.auth = AuthConfig.from_settings(config.ytdlp)

    if not config.ytdlp.js_runtime and config.ytdlp.auto_detect_runtime:
        deno = shutil.which("deno")
        if deno:
            state.js_runtime = f"deno:{deno}"

    state.ytdlp_version = await detect_ytdlp_version()

    console.print(f"[green]✓ {config.api.title} ready (yt-dlp {state.ytdlp_version})[/green]")
    console.print(f"[dim]Downloads will be saved to: {config.paths.downloads_dir}[/dim]")
    console.print(f"[dim]Auth: {state.auth.describe(state.auth.cookies_file_exists())}[/dim]")
    if config.api.environment == "production":
        console.print("[bold]Running in production mode[/bold]")


@app.on_event("shutdown")
async def shutdown_event():
    console.print("[dim]✓ HTTP server closed[/dim]")
