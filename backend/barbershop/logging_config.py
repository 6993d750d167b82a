# backend/barbershop/logging_config.py
# audit: method / path / status / duration per request; never blocks, never touches the DB

import json
import logging
import time

from fastapi import Request

audit_logger = logging.getLogger("barbershop.audit")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def audit_middleware(request: Request, call_next):
    start_ts = time.time()

    response = await call_next(request)

    duration_ms = int((time.time() - start_ts) * 1000)

    record = {
        "ts": int(start_ts),
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "ip": request.headers.get("X-Real-IP") or (request.client.host if request.client else None),
        "client_id": request.headers.get("X-Client-Id"),
        "duration_ms": duration_ms,
    }

    audit_logger.info(json.dumps(record, ensure_ascii=False))

    return response
