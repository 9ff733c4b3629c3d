import logging

import uvicorn
from fastapi import FastAPI

from salon_scheduling.api.v1.appointments import router as appointments_router
from salon_scheduling.core.config import settings

# Fields passed through `extra=` by the scheduling use cases.
LOG_CONTEXT_KEYS = (
    "appointment_id",
    "provider_id",
    "client_id",
    "status",
    "target_status",
    "conflict_id",
    "error",
)


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        context = " ".join(
            f"{key}={getattr(record, key)}"
            for key in LOG_CONTEXT_KEYS
            if getattr(record, key, None) not in (None, "")
        )
        base = super().format(record)
        return f"{base} | {context}" if context else base


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


def create_app() -> FastAPI:
    application = FastAPI(title=f"{settings.BUSINESS_NAME} Appointment Scheduling", version="1.0.0")
    application.include_router(appointments_router, prefix="/api/v1", tags=["appointments"])

    @application.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "store": settings.STORE_PROVIDER}

    return application


configure_logging(settings.LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    # python -m salon_scheduling.main
    uvicorn.run("salon_scheduling.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.ENV == "dev")
