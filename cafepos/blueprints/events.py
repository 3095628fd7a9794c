"""Server-sent events stream of live order notifications."""
from flask import Blueprint, Response, current_app, stream_with_context
from redis.exceptions import RedisError

from cafepos.blueprints.metrics import event_streams_open
from cafepos.exceptions import CafeError
from cafepos.services.event_service import get_event_bus, stream_events

events_bp = Blueprint('events', __name__, url_prefix='/api')


@events_bp.route('/events', methods=['GET'])
def stream():
    """
    ``text/event-stream`` of ``new-order`` events for kitchen and admin
    screens. Clients re-fetch the order lists when an event arrives.
    """
    try:
        pubsub = get_event_bus().subscribe()
    except RedisError as e:
        current_app.logger.error(f"Cannot open event subscription: {e}")
        raise CafeError('Live order events are unavailable', 503)

    response = Response(
        stream_with_context(stream_events(
            pubsub,
            keepalive_seconds=current_app.config.get('SSE_KEEPALIVE_SECONDS', 15)
        )),
        mimetype='text/event-stream',
        headers={
            'Cache-Control': 'no-cache',
            'X-Accel-Buffering': 'no',
        }
    )
    event_streams_open.inc()

    def close_subscription():
        pubsub.close()
        event_streams_open.dec()

    response.call_on_close(close_subscription)
    return response
