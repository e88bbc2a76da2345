"""Component-scoped structlog loggers.

Applications configure structlog themselves; the helpers only bind
the component name and an optional correlation ID so a failed save
can be traced back to the unit of work that issued it.
"""

import structlog


def get_logger(component: str, correlation_id: str | None = None) -> structlog.BoundLogger:
    """Return a logger bound with component and, if given, correlation_id.

    Call at log time rather than import time so the binding picks up
    whatever structlog configuration is active then.
    """
    logger = structlog.get_logger().bind(component=component)
    if correlation_id:
        logger = logger.bind(correlation_id=correlation_id)
    return logger
