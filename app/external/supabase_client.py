from __future__ import annotations

import logging
from functools import lru_cache

from supabase import Client, create_client

from app.core.config import DataStoreConfig

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def get_supabase_client(config: DataStoreConfig) -> Client:
    """Admin Supabase client for the given service-role credentials, cached per config."""
    client = create_client(config.url, config.key)
    logger.info("Supabase client initialized for %s.", config.url)
    return client
