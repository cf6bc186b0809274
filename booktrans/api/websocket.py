"""
WebSocket handlers for real-time job updates
"""
from flask import request
from flask_socketio import emit

from booktrans.utils.unified_logger import debug, error


def configure_websocket_handlers(socketio, controller):
    """
    Configure WebSocket event handlers and push every job snapshot as 'job_update'.

    Returns:
        Function removing the job subscription
    """

    @socketio.on('connect')
    def handle_websocket_connect():
        debug(f'WebSocket client connected: {request.sid}')
        emit('connected', {'message': 'Connected to translation server via WebSocket'})
        job = controller.get_current()
        emit('job_update', {'job': job.to_dict() if job else None})

    @socketio.on('disconnect')
    def handle_websocket_disconnect():
        debug(f'WebSocket client disconnected: {request.sid}')

    def emit_update(snapshot):
        try:
            socketio.emit('job_update', {'job': snapshot.to_dict() if snapshot else None}, namespace='/')
        except Exception as e:
            error(f"WebSocket emission error: {e}")

    return controller.subscribe(emit_update)
