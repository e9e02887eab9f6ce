from urllib.parse import urlparse

import sentry_sdk
from flask import Blueprint, Flask, current_app, request
from flask_cors import CORS
from sentry_sdk.integrations.flask import FlaskIntegration
from werkzeug.middleware.proxy_fix import ProxyFix

from shorty.codegen import CodeGenerator
from shorty.config import Config
from shorty.database import create_db_and_tables, make_engine
from shorty.errors import NotFoundError, register_error_handlers
from shorty.ranges import DEFAULT_RANGE, RangeQuery, parse_range
from shorty.redirects import RedirectResolver
from shorty.schemas import link_to_dict, parse_id, validate_link_input, visit_to_dict
from shorty.store import LinkStore

api = Blueprint("api", __name__)


def is_inclusive():
    # sort/filter важны только фактом присутствия
    return bool(request.args.get("sort")) or bool(request.args.get("filter"))


def with_content_range(body, page):
    return body, 200, {"Content-Range": page.content_range}


@api.route("/links", methods=["GET"])
def list_links():
    raw_range = request.args.get("range", "").strip()
    base_url = current_app.config["BASE_URL"]

    # Без range отдаем все ссылки целиком
    if not raw_range:
        page = current_app.links_query.execute_all()
    else:
        page = current_app.links_query.execute(parse_range(raw_range), is_inclusive())

    return with_content_range([link_to_dict(link, base_url) for link in page.rows], page)


@api.route("/links", methods=["POST"])
def create_link():
    data = validate_link_input(request.get_json(silent=True))
    link = current_app.codegen.create(data.original_url, data.short_name)
    return link_to_dict(link, current_app.config["BASE_URL"]), 201


@api.route("/links/<link_id>", methods=["GET"])
def get_link(link_id):
    link = current_app.store.get_link(parse_id(link_id))
    return link_to_dict(link, current_app.config["BASE_URL"])


@api.route("/links/<link_id>", methods=["PUT"])
def update_link(link_id):
    link_id = parse_id(link_id)
    data = validate_link_input(request.get_json(silent=True))

    short_name = data.short_name
    if not short_name:
        # Пустой short_name - оставляем текущий код
        short_name = current_app.store.get_link(link_id).short_name

    link = current_app.store.update_link(link_id, data.original_url, short_name)
    return link_to_dict(link, current_app.config["BASE_URL"])


@api.route("/links/<link_id>", methods=["DELETE"])
def delete_link(link_id):
    if current_app.store.delete_link(parse_id(link_id)) == 0:
        raise NotFoundError()
    return "", 204


@api.route("/link_visits", methods=["GET"])
def list_link_visits():
    # Заголовок Range важнее query-параметра
    raw_range = request.headers.get("Range", "").strip()
    if not raw_range:
        raw_range = request.args.get("range", "").strip()

    bounds = parse_range(raw_range) if raw_range else DEFAULT_RANGE
    page = current_app.visits_query.execute(bounds, is_inclusive())

    return with_content_range([visit_to_dict(visit) for visit in page.rows], page)


DEV_ORIGIN = "http://localhost:5173"


def allowed_origins(base_url):
    origins = [DEV_ORIGIN]
    parsed = urlparse(base_url)
    if parsed.scheme and parsed.netloc:
        origins.append(f"{parsed.scheme}://{parsed.netloc}")
    return origins


def create_app(config=None, store=None):
    config = config or Config.from_env()

    if config.sentry_dsn:
        sentry_sdk.init(dsn=config.sentry_dsn, integrations=[FlaskIntegration()])

    # Логгеры модулей shorty.* пишут через app.logger
    app = Flask("shorty")
    app.config["BASE_URL"] = config.base_url
    app.config["TESTING"] = config.testing
    app.logger.setLevel(config.log_level)

    CORS(
        app,
        origins=allowed_origins(config.base_url),
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Range"],
        expose_headers=["Content-Range"],
        max_age=43200,
    )

    if store is None:
        engine = make_engine(config)
        create_db_and_tables(engine)
        store = LinkStore(engine)
        app.engine = engine

    app.store = store
    app.codegen = CodeGenerator(store)
    app.resolver = RedirectResolver(store)
    app.links_query = RangeQuery("links", store.count_links, store.list_links)
    app.visits_query = RangeQuery("link_visits", store.count_visits, store.list_visits)

    if config.proxy_hops > 0:
        hops = config.proxy_hops
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops)

    @app.route("/ping", methods=["GET"])
    def ping():
        return "pong"

    @app.route("/r/<code>", methods=["GET"])
    def redirect_by_code(code):
        return app.resolver.resolve(
            code,
            ip=request.remote_addr or "",
            user_agent=request.headers.get("User-Agent", ""),
            referer=request.headers.get("Referer", ""),
        )

    app.register_blueprint(api, url_prefix="/api")
    # Те же ручки без префикса
    app.register_blueprint(api, name="api_root")

    register_error_handlers(app)

    return app
