"""
End-to-end tests for typed route registration (routing.py).

Requests go through the Flask test client against the sample app.
"""

import logging

import pytest
from flask import Blueprint, Flask

from typed_routes import ParameterMeta, RouteContext, TypedRoute, TypedRoutes, param
from typed_routes.config import Config
from sample_app import CreateUserContext, PathContext, ShowContext, show


class TestHelloRoute:

    @pytest.mark.parametrize("path", ["/hello", "/hello-async"])
    def test_plain(self, client, path):
        response = client.get(path)
        assert response.status_code == 200
        assert response.get_data(as_text=True) == "Hello"
        assert response.mimetype == "text/plain"

    @pytest.mark.parametrize("path", ["/hello", "/hello-async"])
    def test_echo(self, client, path):
        response = client.get(f"{path}?echo=10")
        assert response.status_code == 200
        assert response.get_data(as_text=True) == "10"

    @pytest.mark.parametrize("path", ["/hello", "/hello-async"])
    def test_malformed_echo_ignored(self, client, path):
        response = client.get(f"{path}?echo=a21f")
        assert response.status_code == 200
        assert response.get_data(as_text=True) == "Hello"

    def test_malformed_echo_with_debug_logging(self, client, caplog, monkeypatch):
        monkeypatch.setattr(Config, "LOG_COERCION_FAILURES", True)
        with caplog.at_level(logging.DEBUG, logger="typed_routes.request"):
            response = client.get("/hello?echo=a21f")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "Hello"
        assert any(getattr(record, "param", None) == "echo" for record in caplog.records)

    def test_overlong_echo_ignored(self, client):
        response = client.get("/hello?echo=" + "1" * 5000)
        assert response.status_code == 200
        assert response.get_data(as_text=True) == "Hello"

    @pytest.mark.parametrize("path", ["/hello", "/hello-async"])
    def test_fail_hard(self, client, path):
        response = client.get(f"{path}?failHard=t")
        assert response.status_code == 400
        assert response.get_data(as_text=True) == ""

    def test_wrong_method(self, client):
        assert client.post("/hello").status_code == 405


class TestPathParameters:

    def test_typed_path_parameter(self, client):
        response = client.get("/users/21")
        assert response.status_code == 200
        assert response.get_data(as_text=True) == "42"

    def test_catchall(self, client):
        response = client.get("/files/a/b/c.txt")
        assert response.get_data(as_text=True) == "a/b/c.txt"

    def test_parameter_metadata_recorded(self, app, routes):
        route = next(r for r in routes.routes if r.endpoint == "user_double")
        assert route.user_info == {"typed_parameter:id": ParameterMeta(int, "The user id")}
        assert app.view_functions["user_double"].user_info == route.user_info

    def test_string_parameter_syntax(self):
        app = Flask(__name__)
        route = TypedRoutes(app).get("orders/:order_id", context=PathContext, use=show)
        assert route.rule == "/orders/<order_id>"
        assert route.user_info == {"typed_parameter:order_id": ParameterMeta(str, None)}


class TestBodyHandling:

    def test_json_round_trip(self, client):
        response = client.post("/users", json={"name": "ada", "age": 36})
        assert response.status_code == 201
        assert response.get_json() == {"name": "ada", "age": 36}
        assert response.headers["Cache-Control"] == "no-store"

    def test_default_content_type(self, client):
        response = client.post("/users", data='{"name": "ada"}')
        assert response.status_code == 201
        assert response.get_json() == {"name": "ada", "age": 0}

    def test_body_over_limit_rejected_before_handler(self):
        calls = []

        def handler(req):
            calls.append(req)
            return "ok"

        app = Flask(__name__)
        TypedRoutes(app, max_body_size=4).post("upload", context=PathContext, use=handler)
        response = app.test_client().post("/upload", data="123456")

        assert response.status_code == 413
        assert calls == []

    def test_route_limit_overrides_registry_limit(self):
        app = Flask(__name__)
        routes = TypedRoutes(app, max_body_size=4)
        routes.post("upload", context=PathContext, use=lambda req: "ok", max_body_size=100)
        assert app.test_client().post("/upload", data="123456").status_code == 200

    def test_app_config_limit(self):
        app = Flask(__name__)
        app.config["TYPED_ROUTES_MAX_BODY_SIZE"] = 2
        TypedRoutes(app).post("upload", context=PathContext, use=lambda req: "ok")
        assert app.test_client().post("/upload", data="123").status_code == 413

    def test_collection_disabled(self):
        app = Flask(__name__)
        routes = TypedRoutes(app, max_body_size=1)
        routes.post(
            "stream",
            context=PathContext,
            use=lambda req: req.get_data(as_text=True),
            collect_body=False,
        )
        response = app.test_client().post("/stream", data="streamed")
        assert response.status_code == 200
        assert response.get_data(as_text=True) == "streamed"


class TestRegistration:

    def test_decorator_returns_handler(self):
        app = Flask(__name__)
        routes = TypedRoutes(app)

        @routes.get("ping", context=PathContext)
        def ping(req):
            return req.response[PathContext.success].encode("pong")

        assert callable(ping)
        assert routes.routes[0].handler is ping
        assert app.test_client().get("/ping").get_data(as_text=True) == "pong"

    def test_use_returns_typed_route(self):
        app = Flask(__name__)
        route = TypedRoutes(app).put("users", param("id", int), context=PathContext, use=show)
        assert isinstance(route, TypedRoute)
        assert route.method == "PUT"
        assert route.path_string == "users/:id"
        assert route.context is PathContext
        assert route.request_body_type is PathContext.request_body_type

    def test_any_method(self):
        app = Flask(__name__)
        TypedRoutes(app).on("options", "preflight", PathContext, use=lambda req: "checked")
        response = app.test_client().open("/preflight", method="OPTIONS")
        assert response.get_data(as_text=True) == "checked"

    def test_endpoint_names_unique(self):
        app = Flask(__name__)
        routes = TypedRoutes(app)
        first = routes.get("a", context=ShowContext, use=show)
        second = routes.post("a", context=ShowContext, use=show)
        third = routes.delete("b", context=ShowContext, use=show)
        assert [first.endpoint, second.endpoint, third.endpoint] == ["show", "show_post", "show_delete"]

    def test_endpoint_names_unique_across_registries(self):
        app = Flask(__name__)
        first = TypedRoutes(app).get("a", context=ShowContext, use=show)
        second = TypedRoutes(app).get("b", context=ShowContext, use=show)

        assert (first.endpoint, second.endpoint) == ("show", "show_get")
        assert app.test_client().get("/b").get_data(as_text=True) == "Hello"

    def test_endpoint_name_avoids_existing_views(self):
        app = Flask(__name__)
        app.add_url_rule("/plain", endpoint="show", view_func=lambda: "plain")
        route = TypedRoutes(app).get("typed", context=ShowContext, use=show)

        client = app.test_client()
        assert route.endpoint == "show_get"
        assert client.get("/plain").get_data(as_text=True) == "plain"
        assert client.get("/typed").get_data(as_text=True) == "Hello"

    def test_endpoint_names_unique_across_blueprint_registries(self):
        bp = Blueprint("api", __name__)
        TypedRoutes(bp).get("a", context=ShowContext, use=show)
        TypedRoutes(bp).get("b", context=ShowContext, use=show)

        app = Flask(__name__)
        app.register_blueprint(bp, url_prefix="/api")
        assert {"api.show", "api.show_get"} <= set(app.view_functions)

    def test_explicit_endpoint(self):
        app = Flask(__name__)
        route = TypedRoutes(app).patch("a", context=ShowContext, use=show, endpoint="patch_a")
        assert route.endpoint == "patch_a"
        assert "patch_a" in app.view_functions

    def test_context_must_be_route_context(self):
        app = Flask(__name__)
        with pytest.raises(TypeError):
            TypedRoutes(app).get("a", context=object, use=show)
        with pytest.raises(TypeError):
            TypedRoutes(app).get("a", context=RouteContext(), use=show)

    def test_blueprint(self):
        bp = Blueprint("api", __name__)
        TypedRoutes(bp).get("hello", context=ShowContext, use=show)

        app = Flask(__name__)
        app.register_blueprint(bp, url_prefix="/api")
        response = app.test_client().get("/api/hello?echo=5")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "5"
        assert "api.show" in app.view_functions

    def test_registration_logged(self, caplog):
        app = Flask(__name__)
        with caplog.at_level(logging.DEBUG, logger="typed_routes.routing"):
            TypedRoutes(app).post("users", context=CreateUserContext, use=show)

        assert any(
            "typed_route_registered: POST /users" in record.getMessage()
            for record in caplog.records
        )
