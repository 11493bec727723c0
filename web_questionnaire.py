#!/usr/bin/env python3
"""
Web-based FitForge questionnaire (JSON API)

Routes:
- POST /api/start     new session, returns its id and the first question
- GET  /api/question  current question for ?session_id=
- POST /api/answer    answer the current question (400 with field errors)
- POST /api/back      previous question
- POST /api/reset     start over
- GET  /api/profile   profile accumulated so far

Run:
    python3 web_questionnaire.py

Then call: http://localhost:5002/api/start
"""

import logging
import os
import sys
import threading
from pathlib import Path
from flask import Flask, request, jsonify
import secrets

# Load .env file
_env_path = Path(__file__).resolve().parent / ".env"
if _env_path.exists():
    for _line in _env_path.read_text().splitlines():
        _line = _line.strip()
        if _line and not _line.startswith("#") and "=" in _line:
            _k, _, _v = _line.partition("=")
            os.environ.setdefault(_k.strip(), _v.strip())

# Add project to path
sys.path.insert(0, str(Path(__file__).parent))

from fitforge.branching.engine import QuestionnaireEngine, QuestionnaireSession
from fitforge.errors import GraphIntegrityError, ValidationError
from fitforge.injury_kb import DEFAULT_KB_PATH, InjuryKnowledgeBase

logging.basicConfig(
    level=os.environ.get("FITFORGE_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("web_questionnaire")

app = Flask(__name__)
app.secret_key = secrets.token_hex(16)

engine = QuestionnaireEngine(
    knowledge_base=InjuryKnowledgeBase.from_json(os.environ.get("FITFORGE_KB_PATH") or DEFAULT_KB_PATH)
)

# Store sessions per session id
sessions = {}
sessions_lock = threading.Lock()


def _request_data() -> dict:
    return request.get_json(silent=True) or {}


def _get_session(session_id):
    with sessions_lock:
        return sessions.get(session_id)


def _invalid_session():
    return jsonify({'error': 'Invalid session'}), 400


@app.errorhandler(GraphIntegrityError)
def handle_graph_error(e):
    logger.error("Question flow error: %s", e)
    return jsonify({'error': 'Question flow error', 'detail': str(e)}), 500


@app.route('/api/start', methods=['POST'])
def start_questionnaire():
    session_id = secrets.token_hex(8)
    session = QuestionnaireSession(engine, session_id=session_id)

    with sessions_lock:
        sessions[session_id] = session

    logger.info("Started session %s", session_id)
    return jsonify(session.to_dict())


@app.route('/api/question', methods=['GET'])
def get_question():
    session = _get_session(request.args.get('session_id'))
    if session is None:
        return _invalid_session()

    return jsonify(session.to_dict())


@app.route('/api/answer', methods=['POST'])
def answer():
    data = _request_data()
    session = _get_session(data.get('session_id'))
    if session is None:
        return _invalid_session()

    try:
        state = session.advance(data.get('value'))
    except ValidationError as e:
        return jsonify({
            'error': 'Invalid answer',
            'question_id': e.question_id,
            'errors': e.errors
        }), 400

    return jsonify(session.describe(state))


@app.route('/api/back', methods=['POST'])
def back():
    session = _get_session(_request_data().get('session_id'))
    if session is None:
        return _invalid_session()

    return jsonify(session.describe(session.back()))


@app.route('/api/reset', methods=['POST'])
def reset():
    session = _get_session(_request_data().get('session_id'))
    if session is None:
        return _invalid_session()

    return jsonify(session.describe(session.reset()))


@app.route('/api/profile', methods=['GET'])
def get_profile():
    session = _get_session(request.args.get('session_id'))
    if session is None:
        return _invalid_session()

    return jsonify({
        'sessionId': session.session_id,
        'isComplete': session.is_complete,
        'profile': session.profile.to_dict()
    })


if __name__ == '__main__':
    port = int(os.environ.get("PORT", 5002))
    print(f"""
╔═══════════════════════════════════════════════════════════════╗
║     FITFORGE QUESTIONNAIRE - JSON API                         ║
╚═══════════════════════════════════════════════════════════════╝

Starting web server on port {port}...

Press Ctrl+C to stop the server.
    """)

    app.run(debug=True, host='0.0.0.0', port=port)
