"""Observability configuration using Logfire.

Usage:
    import logfire

    logfire.info("Comment added", comment_id=comment.id, video_id=video_id)

    with logfire.span("comment_service.fetch_comments", video_id=video_id):
        ...
"""

import logfire

from reel.config import Settings


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for observability.

    Logs go to the console; they are also sent to Logfire when
    OBSERVABILITY__SEND_TO_LOGFIRE is true, or when it is unset and
    OBSERVABILITY__LOGFIRE_TOKEN is present.

    Args:
        settings: Client settings
    """
    if settings.observability.send_to_logfire is not None:
        send_to_logfire = settings.observability.send_to_logfire
    else:
        send_to_logfire = bool(settings.observability.logfire_token)

    config_kwargs = {
        "service_name": "reel-client",
        "service_version": "0.1.0",
        "environment": settings.environment,
        "send_to_logfire": send_to_logfire,
        "console": logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    }
    if settings.observability.logfire_token:
        config_kwargs["token"] = settings.observability.logfire_token

    logfire.configure(**config_kwargs)

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        debug=settings.debug,
        send_to_logfire=send_to_logfire,
        has_token=bool(settings.observability.logfire_token),
    )


def instrument_httpx() -> None:
    """Trace every outbound REST call (method, URL, status, latency)."""
    logfire.instrument_httpx()
    logfire.info("httpx instrumented")
