from flask import Blueprint, current_app, jsonify, request
from blackjack.exceptions import RegistryBusy
from blackjack.services.deck import deal

main = Blueprint('main', __name__)

WELCOME_HTML = (
    "<h1>Blackjack rooms server</h1>\n"
    "<p>Connect with Socket.IO to create or join a room.</p>"
)


def _registry():
    return current_app.extensions['lifecycle'].registry


@main.route('/')
def index():
    return WELCOME_HTML


@main.route('/health')
def health_check():
    return "OK", 200


@main.route('/message')
def message():
    return jsonify({'status': 'success', 'content': 'This is a JSON message.'})


@main.route('/post_message', methods=['POST'])
def post_message():
    """Echo a ``{status, content}`` message back, flagging non-success input."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not all(isinstance(data.get(k), str) for k in ('status', 'content')):
        return jsonify({'status': 'error', 'content': 'Expected JSON with string status and content'}), 400

    status = 'received' if data['status'] == 'success' else 'error'
    response = {'status': status, 'content': f"Message received: {data['content']}"}
    if status == 'error':
        return jsonify(response), 400
    return jsonify(response), 200


@main.route('/blackjack_init')
def blackjack_init():
    """Deal a standalone deck, unrelated to any room."""
    hand1, hand2, remainder = deal()
    return jsonify({
        'par_1': list(hand1),
        'par_2': list(hand2),
        'restante': list(remainder),
    })


@main.route('/rooms')
def list_open_rooms():
    try:
        rooms = _registry().open_rooms()
    except RegistryBusy as exc:
        current_app.logger.warning(f"[registry-busy] path=/rooms: {exc}")
        return jsonify({'error': 'Server busy'}), 503
    return jsonify([room.to_dict() for room in rooms])


@main.route('/rooms/<string:room_id>')
def get_room(room_id):
    try:
        room = _registry().find_room(room_id)
    except RegistryBusy as exc:
        current_app.logger.warning(f"[registry-busy] path=/rooms/{room_id}: {exc}")
        return jsonify({'error': 'Server busy'}), 503
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(room.to_dict())
