"""Flask web application: task API with JWT authentication and the browser client."""

# 1) Imports + setup
# Flask utilities, CORS (so a frontend on another origin can call the API),
# JWT auth (flask_jwt_extended) and Pydantic schemas for request bodies.
import logging
import signal
import sys
import time
from datetime import timedelta
from typing import Any, Mapping, Optional

from flask import Blueprint, Flask, current_app, g, jsonify, render_template, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager, current_user, jwt_required
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from task_tracker import config
from task_tracker.auth import AuthService
from task_tracker.errors import TaskNotFoundError, UserExistsError
from task_tracker.models import utc_now_iso
from task_tracker.schemas import (
    LoginRequest, RegisterRequest, TaskCreateRequest, TaskUpdateRequest,
    failed_fields, json_object,
)
from task_tracker.store import MemoryStore
from task_tracker.tasks import TaskService

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)

PROCESS_STARTED = time.monotonic()

api = Blueprint('api', __name__, url_prefix='/api')


def auth_service() -> AuthService:
    return current_app.extensions['auth_service']


def task_service() -> TaskService:
    return current_app.extensions['task_service']


def request_body() -> dict:
    return json_object(request.get_json(silent=True))


# 2) App factory
# One store per app; tests build a fresh app (and store) for every case.
def create_app(store: Optional[MemoryStore] = None,
               config_overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Build the Flask app around a store (a new empty one by default)."""
    app = Flask(__name__,
                template_folder=str(config.TEMPLATE_DIR),
                static_folder=str(config.STATIC_DIR))

    # Configures JWT signing + token expiry
    app.config['JWT_SECRET_KEY'] = config.JWT_SECRET_KEY
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(seconds=config.JWT_ACCESS_TOKEN_EXPIRES)
    app.config['JWT_TOKEN_LOCATION'] = ['headers']
    app.config.update(config_overrides or {})
    app.secret_key = app.config['JWT_SECRET_KEY']

    store = store if store is not None else MemoryStore()
    app.extensions['task_store'] = store
    app.extensions['auth_service'] = AuthService(store)
    app.extensions['task_service'] = TaskService(store)

    CORS(app, origins=config.CORS_ORIGINS)
    jwt = JWTManager(app)
    register_auth_guard(jwt, app.extensions['auth_service'])

    app.register_blueprint(api)
    register_request_logging(app)
    register_error_handlers(app)

    @app.route('/')
    def index():
        """Render the task dashboard page."""
        return render_template('index.html')

    return app


# 3) Auth guard
# @jwt_required() extracts and verifies the Bearer token; these callbacks
# resolve the user and shape every rejection as {"error": ...} with a 401.
def register_auth_guard(jwt: JWTManager, auth: AuthService) -> None:

    @jwt.user_lookup_loader
    def load_user(jwt_header, jwt_data):
        user_id = AuthService.user_id_from_subject(jwt_data['sub'])
        if user_id is None:
            return None
        return auth.get_user_by_id(user_id)

    @jwt.user_lookup_error_loader
    def user_lookup_failed(jwt_header, jwt_data):
        if AuthService.user_id_from_subject(jwt_data['sub']) is None:
            message = 'Invalid token payload'
        else:
            message = 'Invalid token: User not found'
        logger.info(f"Authentication failed - {message}: path={request.path} ip={request.remote_addr}")
        return jsonify({'error': message}), 401

    @jwt.unauthorized_loader
    def missing_token(reason):
        logger.info(f"Authentication failed - {reason}: path={request.path} ip={request.remote_addr}")
        return jsonify({'error': 'Authorization header missing or malformed'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        logger.info(f"Authentication failed - {reason}: path={request.path} ip={request.remote_addr}")
        return jsonify({'error': 'Invalid token format'}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_data):
        logger.info(f"Authentication failed - token expired: sub={jwt_data.get('sub')} path={request.path}")
        return jsonify({'error': 'Token has expired'}), 401


# 4) Request logging + error handlers
def register_request_logging(app: Flask) -> None:

    @app.before_request
    def log_request():
        g.request_started = time.perf_counter()
        logger.info(f"Incoming {request.method} {request.path} from {request.remote_addr}")

    @app.after_request
    def log_response(response):
        started = g.get('request_started')
        duration_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.info(
            f"Request completed: {request.method} {request.path} "
            f"status={response.status_code} duration={duration_ms:.1f}ms ip={request.remote_addr}"
        )
        return response


def register_error_handlers(app: Flask) -> None:

    @app.errorhandler(HTTPException)
    def http_error(e):
        # Routing redirects are HTTPExceptions too
        if e.code is None or e.code < 400:
            return e
        messages = {404: 'Not found', 405: 'Method not allowed'}
        return jsonify({'error': messages.get(e.code, e.description)}), e.code

    @app.errorhandler(Exception)
    def unhandled_error(e):
        logger.error(
            f"Unhandled error: {e} method={request.method} path={request.path} "
            f"ip={request.remote_addr} user_agent={request.user_agent.string or 'Unknown'}",
            exc_info=True
        )
        return jsonify({'error': 'Something went wrong!'}), 500


# 5) Routes
@api.route('/health', methods=['GET'])
def health():
    """Health check endpoint."""
    users, tasks = current_app.extensions['task_store'].counts()
    health_data = {
        'status': 'OK',
        'timestamp': utc_now_iso(),
        'uptime': round(time.monotonic() - PROCESS_STARTED, 3),
        'users': users,
        'tasks': tasks,
    }
    logger.info(f"Health check requested: users={users} tasks={tasks}")
    return jsonify(health_data)


# Presence checks only; the token is returned so the client can store it.
@api.route('/auth/register', methods=['POST'])
def register():
    """Register a new user."""
    try:
        payload = request_body()
        logger.info(f"Registration attempt: email={payload.get('email')} ip={request.remote_addr}")

        data = RegisterRequest.model_validate(payload)
        user = auth_service().create_user(data.email, data.password, data.name)
        token = AuthService.issue_token(user)

        return jsonify({
            'message': 'User registered successfully',
            'user': user.to_public(),
            'token': token
        }), 201

    except ValidationError:
        logger.info(f"Registration failed - missing required fields: ip={request.remote_addr}")
        return jsonify({'error': 'Email, password, and name are required'}), 400
    except UserExistsError as e:
        logger.info(f"Registration failed - user already exists: email={e.email}")
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Registration error: {e}", exc_info=True)
        return jsonify({'error': 'Server error during registration'}), 500


# Unknown email and wrong password get the same answer.
@api.route('/auth/login', methods=['POST'])
def login():
    """Login and get a JWT token."""
    try:
        payload = request_body()
        logger.info(f"Login attempt: email={payload.get('email')} ip={request.remote_addr}")

        data = LoginRequest.model_validate(payload)
        user = auth_service().authenticate(data.email, data.password)

        if not user:
            return jsonify({'error': 'Invalid credentials'}), 400

        token = AuthService.issue_token(user)
        logger.info(f"User logged in: id={user.id} email={user.email}")

        return jsonify({
            'message': 'Login successful',
            'user': user.to_public(),
            'token': token
        }), 200

    except ValidationError:
        logger.info(f"Login failed - missing credentials: ip={request.remote_addr}")
        return jsonify({'error': 'Email and password are required'}), 400
    except Exception as e:
        logger.error(f"Login error: {e}", exc_info=True)
        return jsonify({'error': 'Server error during login'}), 500


# Nothing to invalidate server-side; the client discards its token.
@api.route('/auth/logout', methods=['POST'])
def logout():
    """Log out."""
    logger.info(f"Logout requested: ip={request.remote_addr}")
    return jsonify({'message': 'Logged out successfully'})


@api.route('/auth/me', methods=['GET'])
@jwt_required()
def me():
    """Current user info."""
    logger.info(f"User info requested: id={current_user.id}")
    return jsonify({'user': current_user.to_public()})


@api.route('/tasks', methods=['GET'])
@jwt_required()
def list_tasks():
    """All tasks of the authenticated user."""
    tasks = task_service().list_tasks(current_user.id)
    return jsonify([task.to_dict() for task in tasks])


@api.route('/tasks/<int:task_id>', methods=['GET'])
@jwt_required()
def get_task(task_id):
    try:
        task = task_service().get_task(task_id, current_user.id)
    except TaskNotFoundError as e:
        return jsonify({'error': str(e)}), 404
    return jsonify(task.to_dict())


@api.route('/tasks', methods=['POST'])
@jwt_required()
def create_task():
    """Create a task for the authenticated user."""
    payload = request_body()
    try:
        data = TaskCreateRequest.model_validate(payload)
    except ValidationError as e:
        if 'title' in failed_fields(e):
            logger.info(f"Task creation failed - missing title: user_id={current_user.id}")
            return jsonify({'error': 'Title is required'}), 400
        return jsonify({'error': 'Invalid task fields'}), 400

    task = task_service().create_task(current_user.id, data)
    return jsonify(task.to_dict()), 201


# Partial update: a key present in the body is applied even if falsy.
@api.route('/tasks/<int:task_id>', methods=['PUT'])
@jwt_required()
def update_task(task_id):
    tasks = task_service()
    try:
        tasks.get_task(task_id, current_user.id)
        data = TaskUpdateRequest.model_validate(request_body())
        task = tasks.update_task(task_id, current_user.id, data.changes())
    except TaskNotFoundError as e:
        return jsonify({'error': str(e)}), 404
    except ValidationError:
        return jsonify({'error': 'Invalid task fields'}), 400
    return jsonify(task.to_dict())


@api.route('/tasks/<int:task_id>', methods=['DELETE'])
@jwt_required()
def delete_task(task_id):
    try:
        task = task_service().delete_task(task_id, current_user.id)
    except TaskNotFoundError as e:
        return jsonify({'error': str(e)}), 404
    return jsonify({'message': 'Task deleted successfully', 'task': task.to_dict()})


@api.route('/tasks/<int:task_id>/toggle', methods=['PATCH'])
@jwt_required()
def toggle_task(task_id):
    try:
        task = task_service().toggle_task(task_id, current_user.id)
    except TaskNotFoundError as e:
        return jsonify({'error': str(e)}), 404
    return jsonify(task.to_dict())


def _shutdown(signum, frame):
    logger.info(f"{signal.Signals(signum).name} received, shutting down gracefully")
    sys.exit(0)


def main():
    """Run the development server."""
    signal.signal(signal.SIGTERM, _shutdown)
    signal.signal(signal.SIGINT, _shutdown)

    app = create_app()
    logger.info(
        f"Starting Flask app on {config.FLASK_HOST}:{config.FLASK_PORT} "
        f"(debug={config.FLASK_DEBUG}, health check: http://localhost:{config.FLASK_PORT}/api/health)"
    )
    app.run(host=config.FLASK_HOST, port=config.FLASK_PORT, debug=config.FLASK_DEBUG)


if __name__ == '__main__':
    main()
