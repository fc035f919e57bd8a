from flask import jsonify


class ApiError(Exception):
    """An error that should reach the client as a JSON envelope with this status."""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def success_response(data=None, message=None, status=200, **extra):
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    body.update(extra)
    return jsonify(body), status


def error_response(error, status=400, message=None):
    body = {'success': False, 'error': error}
    if message:
        body['message'] = message
    return jsonify(body), status
