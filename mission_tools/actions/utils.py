import logging

from fastapi import Depends

from ..settings import Settings, get_settings
from .api import ApiDomainActions
from .base import DomainActions
from .mock import MockDomainActions

logger = logging.getLogger(__name__)

# cached domain actions backend
domain_actions: DomainActions | None = None


def get_domain_actions(
    settings: Settings = Depends(get_settings), rebuild: bool = False
) -> DomainActions:
    global domain_actions
    if domain_actions is None or rebuild:
        if settings.domain_actions_type == "mock":
            logger.info("Returning mock domain actions")
            domain_actions = MockDomainActions()

        elif settings.domain_actions_type == "api":
            logger.info("Returning mission API domain actions")
            domain_actions = ApiDomainActions(settings=settings)
        else:
            raise ValueError(
                f"Invalid domain actions type: {settings.domain_actions_type}"
            )

    return domain_actions
