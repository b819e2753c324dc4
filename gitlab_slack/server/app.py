"""FastAPI application receiving GitLab webhooks."""

from __future__ import annotations

import hmac
import json
import logging

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from gitlab_slack.audit.logger import AuditLogger
from gitlab_slack.config import Settings, load_config
from gitlab_slack.gitlab.api import GitLabApi, GitLabApiError
from gitlab_slack.handlers import default_registry
from gitlab_slack.models import AuditEvent, AuditEventType
from gitlab_slack.slack.client import SlackClient
from gitlab_slack.webhook.dispatcher import DeliveryError, EventDispatcher

logger = logging.getLogger(__name__)

_TOKEN_HEADER = "x-gitlab-token"


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = Settings.from_env()
    config = load_config(settings.config_path)
    audit_logger = AuditLogger.from_env(settings.audit_log_path) if settings.audit_log_path else None

    for project in config.projects:
        logger.info("Tracking project %d (%s) -> %s", project.id, project.name, project.channel or "default channel")

    dispatcher = EventDispatcher(
        project_configs=config.project_map(),
        gitlab=GitLabApi(settings.gitlab_base_url, settings.gitlab_api_token),
        slack=SlackClient(settings.slack_webhook_url),
        registry=default_registry(settings.gitlab_base_url),
        audit_logger=audit_logger,
    )
    return create_app(dispatcher, settings.webhook_token, audit_logger)


def create_app(
    dispatcher: EventDispatcher,
    webhook_token: str | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the webhook receiver app."""
    app = FastAPI(docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/")
    async def receive(request: Request) -> Response:
        if webhook_token and not _verify_token(request, webhook_token):
            if audit_logger:
                audit_logger.log(AuditEvent(
                    event_type=AuditEventType.AUTH_FAILURE,
                    action=f"{request.method} {request.url.path}",
                    result="failure",
                    details={"source_ip": request.client.host if request.client else None},
                ))
            return JSONResponse({"error": "Invalid webhook token"}, status_code=401)

        try:
            data = json.loads(await request.body())
        except ValueError:
            # JSONDecodeError and UnicodeDecodeError
            return JSONResponse({"error": "Request body is not valid JSON"}, status_code=400)
        if not isinstance(data, dict):
            return JSONResponse({"error": "Request body must be a JSON object"}, status_code=400)

        try:
            await dispatcher.handle(data)
        except (DeliveryError, GitLabApiError, httpx.HTTPError) as e:
            logger.exception("Failed to relay %s event", data.get("object_kind"))
            return JSONResponse({"error": str(e)}, status_code=502)
        except Exception:
            logger.exception("Processing failure for %s event", data.get("object_kind"))
            return JSONResponse({"error": "Internal error"}, status_code=500)

        return JSONResponse({"status": "ok"})

    return app


def _verify_token(request: Request, expected: str) -> bool:
    provided = request.headers.get(_TOKEN_HEADER, "")
    if not provided:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())
