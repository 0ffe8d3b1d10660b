"""
Cache utilities for CopaBet
Leaderboard results are cached until the next standings recalculation
is committed
"""

import functools

from flask import current_app
from sqlalchemy import event
from sqlalchemy.orm import Session

from copabet import cache, db

STALE_CACHES_KEY = "stale_caches"


def cached_query(model_name, timeout=None):
    """
    Decorator for caching query results

    The cached value must be plain data (dicts, lists, numbers), not ORM
    instances bound to a session.

    Args:
        model_name: Name of the model for cache key generation
        timeout: Cache timeout in seconds, or the name of a config key holding
            it (defaults to CACHE_DEFAULT_TIMEOUT)
    """

    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            args_str = "_".join(str(arg) for arg in args)
            kwargs_str = "_".join(f"{k}_{v}" for k, v in sorted(kwargs.items()))
            cache_key = f"query_{model_name}_{f.__name__}_{args_str}_{kwargs_str}"

            result = cache.get(cache_key)
            if result is not None:
                current_app.logger.debug(f"Query cache hit: {cache_key}")
                return result

            result = f(*args, **kwargs)
            ttl = timeout
            if isinstance(ttl, str):
                ttl = current_app.config.get(ttl)
            cache.set(cache_key, result, timeout=ttl)
            current_app.logger.debug(f"Query cache set: {cache_key}")

            return result

        return wrapped

    return decorator


def invalidate_model_cache(model_name):
    """
    Invalidate all cache entries for a specific model

    SimpleCache cannot delete by pattern, so the whole cache is cleared.

    Args:
        model_name: Name of the model to invalidate
    """
    cache.clear()
    current_app.logger.debug(f"Cache cleared for model: {model_name}")


def invalidate_on_commit(model_name):
    """
    Invalidate the model's cache once the current transaction commits

    The cache is cleared after the commit, never inside the transaction.
    A rollback drops the pending invalidation.

    Args:
        model_name: Name of the model to invalidate
    """
    db.session.info.setdefault(STALE_CACHES_KEY, set()).add(model_name)


@event.listens_for(Session, "after_commit")
def _invalidate_stale_caches(session):
    for model_name in sorted(session.info.pop(STALE_CACHES_KEY, ())):
        invalidate_model_cache(model_name)


@event.listens_for(Session, "after_rollback")
def _discard_stale_caches(session):
    session.info.pop(STALE_CACHES_KEY, None)
