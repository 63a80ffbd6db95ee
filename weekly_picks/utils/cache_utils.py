"""
Query result caching for the Weekly Picks application

Results are stored under a per-namespace generation number. Invalidating a
namespace moves it to the next generation, so entries written before the
change are never read again and age out on their own.
"""

import functools

from flask import current_app

from weekly_picks import cache

GENERATION_KEY = "generation:{namespace}"


def _generation(namespace):
    generation = cache.get(GENERATION_KEY.format(namespace=namespace))
    return generation if generation is not None else 0


def query_cache_key(namespace, func_name, args, kwargs):
    args_part = ":".join(str(arg) for arg in args)
    kwargs_part = ":".join(f"{k}={v}" for k, v in sorted(kwargs.items()))
    return (
        f"query:{namespace}:g{_generation(namespace)}:{func_name}"
        f":{args_part}:{kwargs_part}"
    )


def cached_query(namespace, timeout=300):
    """
    Cache a query function's return value per argument list

    Args:
        namespace: Invalidation group, e.g. "Leaderboard"
        timeout: Cache timeout in seconds
    """

    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            cache_key = query_cache_key(namespace, f.__name__, args, kwargs)

            result = cache.get(cache_key)
            if result is not None:
                current_app.logger.debug(f"Query cache hit: {cache_key}")
                return result

            result = f(*args, **kwargs)
            cache.set(cache_key, result, timeout=timeout)
            return result

        return wrapped

    return decorator


def invalidate_model_cache(namespace):
    """Drop every cached result of a namespace"""
    key = GENERATION_KEY.format(namespace=namespace)
    # timeout=0 keeps the generation counter for the life of the cache
    cache.set(key, _generation(namespace) + 1, timeout=0)
    current_app.logger.debug(f"Cache namespace {namespace} invalidated")
