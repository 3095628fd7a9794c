"""
Live order events over Redis pub/sub.

Every worker publishes to one shared channel and every connected screen
(kitchen display, admin order views) holds its own subscription, so an
order placed on any worker reaches every stream. Delivery is best-effort:
nothing is replayed, and a screen that was offline catches up on its next
re-fetch of the order lists.
"""
import json
import logging
from typing import Any, Dict, Iterator, Optional, Tuple

import redis
from redis.exceptions import RedisError
from flask import current_app

logger = logging.getLogger(__name__)

NEW_ORDER_EVENT = 'new-order'
DEFAULT_CHANNEL = 'cafepos:orders'


class OrderEventBus:
    """
    Publisher and subscription factory for order events.

    Usage:
        bus = OrderEventBus.from_url('redis://localhost:6379/0')
        bus.publish(NEW_ORDER_EVENT, {'id': 42})
    """

    def __init__(self, client: redis.Redis, channel: str = DEFAULT_CHANNEL):
        self.client = client
        self.channel = channel

    @classmethod
    def from_url(cls, redis_url: str, channel: str = DEFAULT_CHANNEL) -> 'OrderEventBus':
        client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=3,
            socket_keepalive=True,
            health_check_interval=30
        )
        return cls(client, channel)

    def publish(self, event: str, data: Optional[Dict[str, Any]] = None) -> int:
        """
        Broadcast an event on the channel.

        Returns:
            Number of subscriptions that received it (across all workers)

        Raises:
            RedisError: Redis unreachable
        """
        message = json.dumps({'event': event, 'data': data or {}})
        return self.client.publish(self.channel, message)

    def subscribe(self):
        """Open a pub/sub subscription on the channel."""
        pubsub = self.client.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(self.channel)
        return pubsub


def decode_message(message) -> Optional[Tuple[str, Dict[str, Any]]]:
    """(event, data) of a pub/sub message, or None if it is not one of ours."""
    if not message or message.get('type') != 'message':
        return None
    raw = message.get('data')
    if isinstance(raw, bytes):
        raw = raw.decode('utf-8')
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring malformed event payload: {raw!r}")
        return None
    if not isinstance(payload, dict) or not payload.get('event'):
        return None
    return payload['event'], payload.get('data') or {}


def format_sse(event: str, data: Dict[str, Any]) -> str:
    """Frame one server-sent event."""
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def stream_events(pubsub, keepalive_seconds: float = 15) -> Iterator[str]:
    """
    Generator of SSE frames for one client, read from ``pubsub``.

    Emits a keepalive comment whenever nothing arrived for
    ``keepalive_seconds``. The subscription is closed when the client goes
    away or Redis drops the connection.
    """
    try:
        yield ": connected\n\n"
        while True:
            try:
                message = pubsub.get_message(timeout=keepalive_seconds)
            except RedisError as e:
                logger.warning(f"Event stream closed, Redis error: {e}")
                break
            decoded = decode_message(message)
            if decoded is None:
                yield ": keepalive\n\n"
                continue
            yield format_sse(*decoded)
    finally:
        try:
            pubsub.unsubscribe()
            pubsub.close()
        except RedisError as e:
            logger.debug(f"Failed to close event subscription cleanly: {e}")


def init_events(app, client: Optional[redis.Redis] = None) -> OrderEventBus:
    """Attach the event bus to ``app``. Connects lazily, on first use."""
    channel = app.config.get('EVENTS_CHANNEL', DEFAULT_CHANNEL)
    if client is not None:
        bus = OrderEventBus(client, channel)
    else:
        bus = OrderEventBus.from_url(app.config.get('REDIS_URL', 'redis://localhost:6379/0'), channel)
    app.extensions['order_events'] = bus
    return bus


def get_event_bus(app=None) -> OrderEventBus:
    app = app or current_app
    return app.extensions['order_events']


def notify_new_order(order_id: int) -> int:
    """Best-effort broadcast that an order was placed."""
    try:
        return get_event_bus().publish(NEW_ORDER_EVENT, {'id': order_id})
    except RedisError as e:
        logger.error(f"Failed to broadcast new order #{order_id}: {e}")
        return 0
