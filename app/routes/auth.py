from flask import Blueprint, current_app, jsonify, request, session

bp = Blueprint('auth', __name__)

@bp.route('/login', methods=['POST'])
def login():
    # simple admin login (credentials can be set via env vars ADMIN_USER and ADMIN_PASS)
    payload = request.get_json(silent=True) or request.form
    user = (payload.get('username') or '').strip()
    pw = (payload.get('password') or '').strip()

    admin_user = current_app.config.get('ADMIN_USER', 'admin')
    admin_pass = current_app.config.get('ADMIN_PASS', 'password')

    if user == admin_user and pw == admin_pass:
        session['admin'] = True
        return jsonify({'message': 'Logged in'})
    return jsonify({'error': 'Invalid credentials'}), 401


@bp.route('/logout', methods=['POST'])
def logout():
    session.pop('admin', None)
    return jsonify({'message': 'Logged out'})
