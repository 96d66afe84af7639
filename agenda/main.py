import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from agenda.core.exceptions import AgendaError
from agenda.core.logging import setup_logging
from agenda.database import create_db_and_tables
from agenda.models import user, business_settings, service, client, appointment, cost  # noqa: F401
from agenda.routers import users
from agenda.routers import auth
from agenda.routers import business_settings as business_settings_router
from agenda.routers import services
from agenda.routers import clients
from agenda.routers import appointments
from agenda.routers import costs
from agenda.routers import dashboard
from agenda.routers import public

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="agenda")
app.include_router(users.router)
app.include_router(auth.router)
app.include_router(business_settings_router.router)
app.include_router(services.router)
app.include_router(clients.router)
app.include_router(appointments.router)
app.include_router(costs.router)
app.include_router(dashboard.router)
app.include_router(public.router)


@app.exception_handler(AgendaError)
async def agenda_error_handler(request: Request, exc: AgendaError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s", request.method, request.url.path, exc.kind)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
    )


@app.on_event("startup")
def on_startup():
    create_db_and_tables()


@app.get("/")
def root():
    return {"message": "API agenda funcionando 🚀"}
