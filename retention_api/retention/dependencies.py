import hmac
import logging
from typing import Annotated

from fastapi import Header

from retention_api.core.config import settings
from retention_api.core.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


async def verify_cron_secret(
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Require ``Authorization: Bearer <CRON_SECRET>`` when a secret is configured."""
    secret = settings.CRON_SECRET
    if not secret:
        return

    expected = f"Bearer {secret}"
    if authorization is None or not hmac.compare_digest(
        authorization.encode(), expected.encode()
    ):
        logger.warning("Unauthorized attempt to trigger storage cleanup")
        raise UnauthorizedError("Invalid cron authorization token")
