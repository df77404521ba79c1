from flask import Blueprint, jsonify, current_app

from worldstage.services.notify import timestamp

main = Blueprint('main', __name__)


@main.route('/health')
def health():
    return jsonify({
        'status': 'ok',
        'timestamp': timestamp(),
        'environment': current_app.config.get('ENVIRONMENT', 'development'),
    })
