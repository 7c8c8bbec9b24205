import logging


class HealthEndpointFilter(logging.Filter):
    """Drop successful probe requests from access logs; failures still get through."""

    probe_paths: tuple[str, ...] = ("/healthz", "/readyz")

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if any(path in message for path in self.probe_paths):
            return " 200 " not in message
        return True
